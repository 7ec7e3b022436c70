"""Centralized brand configuration for user-facing copy."""

BRAND_NAME = "TalentLens"
BRAND_DOMAIN = "talentlens.io"
BRAND_PRODUCT_NAME = "Talent Assessment Platform"
BRAND_APP_DESCRIPTION = "Assessment assignment, survey and reminder API"

def brand_email_from() -> str:
    return f"{BRAND_NAME} <noreply@{BRAND_DOMAIN}>"
