#!/usr/bin/env python3
"""
Quick smoke script for a running Meeting Router
Run the server first: uvicorn meeting_router.main:app --reload
"""

import argparse

import requests

BASE_URL = "http://127.0.0.1:8000"


def print_agents(label: str, params: dict):
    response = requests.get(f"{BASE_URL}/agents", params=params)
    print(f"   Status: {response.status_code}")
    if response.ok:
        agents = response.json()["agents"]
        print(f"   {label}: {len(agents)} agents")
        for agent in agents:
            print(f"     - {agent['name']} (accountId={agent.get('accountId')}, monthlyLimit={agent.get('monthlyLimit')})")
    else:
        print(f"   Error: {response.text}")
    print()


def run_smoke(category: str = None, interest: str = None):
    print("Testing Meeting Router API...\n")

    print("1. Health...")
    response = requests.get(f"{BASE_URL}/health/ready")
    print(f"   Status: {response.status_code}")
    print(f"   Checks: {response.json()}\n")

    print("2. Specializations...")
    response = requests.get(f"{BASE_URL}/specializations")
    print(f"   Status: {response.status_code}")
    if response.ok:
        names = [s["name"] for s in response.json()["specializations"]]
        print(f"   {len(names)} found: {', '.join(names[:10])}\n")

    filters = {}
    if category:
        filters["categoryFilter"] = category
    if interest:
        filters["interestFilter"] = interest

    print("3. Automatic assignment...")
    print_agents("Automatic", filters)

    print("4. Automatic assignment with even distribution...")
    print_agents("Even distribution", {**filters, "evenDistribution": "true"})

    print("5. Manual assignment...")
    print_agents("Manual", {**filters, "manualMode": "true"})

    print("✅ Smoke run completed!")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Smoke-test a running Meeting Router")
    parser.add_argument("--category", help="categoryFilter to pass to /agents")
    parser.add_argument("--interest", help="interestFilter to pass to /agents")
    args = parser.parse_args()

    try:
        run_smoke(args.category, args.interest)
    except requests.exceptions.ConnectionError:
        print("❌ Error: Could not connect to server.")
        print("Please start the server first:")
        print("  uvicorn meeting_router.main:app --reload")
