# SPDX-License-Identifier: Apache-2.0

"""
Static safety guidance shown to survivors.
"""

from typing import Dict, List

QUICK_CONTACTS: List[Dict[str, str]] = [
    {"label": "Emergency", "contact": "112"},
    {"label": "DV Helpline", "contact": "181 (India)"},
    {"label": "Ambulance", "contact": "108"},
]

SAFETY_TIPS: List[str] = [
    "Use the Quick Exit if someone walks in.",
    "Consider using a private/incognito window.",
    "If it's safe, set a code word with trusted contacts.",
    "Keep essential documents and emergency numbers accessible.",
]

SAFETY_PLAN: List[str] = [
    "Identify safe rooms with exits; avoid kitchens or garages during conflicts.",
    "Keep emergency numbers and spare keys accessible.",
    "Arrange a code word or emoji with trusted people to signal you need help.",
    "Store important documents and some cash in a safe place.",
    "Document incidents (only if it's safe) and consider medical attention for injuries.",
]

EMERGENCY_NOTICE = (
    "If you are in immediate danger, call your local emergency number "
    "(e.g., 112 in India)."
)

FEATURED_RESOURCE_COUNT = 3


def survivor_guidance() -> Dict[str, object]:
    """Guidance block for the survivor overview, as fresh lists."""
    return {
        "notice": EMERGENCY_NOTICE,
        "quickContacts": [dict(contact) for contact in QUICK_CONTACTS],
        "safetyTips": list(SAFETY_TIPS),
        "safetyPlan": list(SAFETY_PLAN),
    }
