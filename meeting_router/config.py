"""Configuration management for Meeting Router."""

import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Application configuration."""

    # Airtable (agents directory)
    AIRTABLE_API_TOKEN: str = os.getenv("AIRTABLE_API_TOKEN", "")
    AIRTABLE_BASE_ID: str = os.getenv("AIRTABLE_BASE_ID", "")
    AIRTABLE_AGENTS_TABLE_ID: str = os.getenv("AIRTABLE_AGENTS_TABLE_ID", "")
    AIRTABLE_SPECIALIZATIONS_TABLE_ID: str = os.getenv("AIRTABLE_SPECIALIZATIONS_TABLE_ID", "")
    AIRTABLE_API_BASE_URL: str = os.getenv("AIRTABLE_API_BASE_URL", "https://api.airtable.com/v0")

    # Cal.com (scheduling platform)
    CALCOM_API_KEY: str = os.getenv("CALCOM_API_KEY", "")
    CALCOM_TEAM_ID: str = os.getenv("CALCOM_TEAM_ID", "")
    CALCOM_API_BASE_URL: str = os.getenv("CALCOM_API_BASE_URL", "https://api.cal.com/v2")
    CALCOM_BOOKINGS_PAGE_SIZE: int = int(os.getenv("CALCOM_BOOKINGS_PAGE_SIZE", "100"))

    # Routing policy
    # Email -> Cal.com user id mapping is reused for this long before a refetch.
    IDENTITY_CACHE_TTL_SECONDS: int = int(os.getenv("IDENTITY_CACHE_TTL_SECONDS", "300"))
    # Even distribution keeps agents within this many bookings of the least loaded one.
    FAIRNESS_GAP: int = int(os.getenv("FAIRNESS_GAP", "3"))
    # Bookings are bucketed into calendar months in this timezone.
    OPERATING_TIMEZONE: str = os.getenv("OPERATING_TIMEZONE", "Asia/Jerusalem")

    # Timeouts
    HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))
    RESOLVE_TIMEOUT_SECONDS: float = float(os.getenv("RESOLVE_TIMEOUT_SECONDS", "30"))

    # Application Settings
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def has_directory_config(cls) -> bool:
        """Check if the Airtable agents table is fully configured."""
        return all([
            cls.AIRTABLE_API_TOKEN,
            cls.AIRTABLE_BASE_ID,
            cls.AIRTABLE_AGENTS_TABLE_ID,
        ])

    @classmethod
    def has_specializations_config(cls) -> bool:
        """Check if the Airtable specializations table is configured."""
        return bool(
            cls.AIRTABLE_API_TOKEN
            and cls.AIRTABLE_BASE_ID
            and cls.AIRTABLE_SPECIALIZATIONS_TABLE_ID
        )

    @classmethod
    def has_calcom_key(cls) -> bool:
        """Check if a Cal.com API key is configured."""
        return bool(cls.CALCOM_API_KEY)

    @classmethod
    def has_calcom_config(cls) -> bool:
        """Check if Cal.com team membership lookups are possible."""
        return bool(cls.CALCOM_API_KEY and cls.CALCOM_TEAM_ID)


# Create a global config instance
config = Config()
