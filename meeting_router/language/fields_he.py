"""
Hebrew Airtable field names.

THIS IS THE ONLY FILE ALLOWED TO CONTAIN HEBREW TEXT.

The agents directory is maintained by the operations team in Hebrew; every
column the router reads is looked up through this module.
"""

from typing import Dict

# Agents table columns
AGENT_FIELDS: Dict[str, str] = {
    "first_name": "שם פרטי",
    "last_name": "שם משפחה",
    "email": "מייל",
    "phone": "סלולרי",
    "block_status": "רמזור",
    "daily_limit": "מכסה יומית",
    "monthly_limit": "מכסה חודשית",
    "weight": "משקל",
}

# Specializations table columns
SPECIALIZATION_FIELDS: Dict[str, str] = {
    "name": "סוגי הלידים",
}

# Traffic-light value that blocks an agent from automatic assignment
FORBIDDEN_BLOCK_STATUS = "🔴"
