"""
Cancellation scripts for common services.
"""
from typing import Dict, List

DEFAULT_SERVICE = "Default"
SERVICE_PLACEHOLDER = "[SERVICE NAME]"

CANCELLATION_SCRIPTS: List[Dict] = [
    {
        "service": "Netflix",
        "method": "chat",
        "script": "Hi, I'd like to cancel my Netflix subscription. I no longer need the service. "
                  "Can you please process the cancellation immediately and confirm when my access will end?",
        "tips": [
            "You can also cancel directly in account settings",
            "No cancellation fee",
            "Access continues until end of billing period",
        ],
    },
    {
        "service": "Spotify",
        "method": "chat",
        "script": "Hello, I want to cancel my Spotify Premium subscription. Please process this cancellation "
                  "and let me know when it will take effect. I understand I'll revert to the free tier.",
        "tips": [
            "Can be done through app settings",
            "Reverts to free tier",
            "Download offline music before cancellation",
        ],
    },
    {
        "service": "Adobe Creative Cloud",
        "method": "phone",
        "script": "I'm calling to cancel my Adobe Creative Cloud subscription. I understand there may be an "
                  "early termination fee, but I'd like to proceed with the cancellation. Can you please "
                  "process this and send me confirmation?",
        "tips": [
            "May have early termination fees",
            "Consider downgrading first",
            "Export your work before cancelling",
        ],
    },
    {
        "service": "Disney+",
        "method": "chat",
        "script": "I'd like to cancel my Disney+ subscription. Please process this cancellation and confirm "
                  "the end date of my service. I no longer need access to the platform.",
        "tips": [
            "Can cancel through account settings",
            "No cancellation penalty",
            "Consider seasonal subscriptions",
        ],
    },
    {
        "service": "Amazon Prime",
        "method": "phone",
        "script": "I want to cancel my Amazon Prime membership. Please process the cancellation and let me "
                  "know about any refund for unused time. I understand I'll lose Prime benefits.",
        "tips": [
            "May offer prorated refund",
            "Loses shipping benefits",
            "Can cancel through account settings",
        ],
    },
    {
        "service": DEFAULT_SERVICE,
        "method": "phone",
        "script": f"Hello, I'm calling to cancel my subscription to {SERVICE_PLACEHOLDER}. I no longer need "
                  "the service and would like to process the cancellation immediately. Can you please "
                  "confirm the cancellation and provide me with a reference number?",
        "tips": [
            "Be firm but polite",
            "Ask for confirmation email",
            "Note down reference numbers",
            "Don't accept retention offers if you're decided",
        ],
    },
]


def search_scripts(term: str = None) -> List[Dict]:
    """Scripts whose service name contains `term`, case-insensitively."""
    term = (term or "").strip().lower()
    return [dict(script) for script in CANCELLATION_SCRIPTS if term in script["service"].lower()]


def get_script(service: str) -> Dict:
    """
    Script for a named service.

    Unknown services get the default script with the service name filled in.
    """
    wanted = service.strip().lower()
    for script in CANCELLATION_SCRIPTS:
        if script["service"].lower() == wanted:
            return dict(script)

    default = next(s for s in CANCELLATION_SCRIPTS if s["service"] == DEFAULT_SERVICE)
    return {
        **default,
        "service": service.strip(),
        "script": default["script"].replace(SERVICE_PLACEHOLDER, service.strip()),
    }
