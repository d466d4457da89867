"""
Configuration settings for the Riskify SWMS application.
"""

import os

# Base directory
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Fixed catalogs (HRCW categories, PPE items) shipped as versioned JSON
CATALOG_DIR = os.getenv('RISKIFY_CATALOG_DIR', os.path.join(BASE_DIR, 'catalogs'))

# Company logo drawn in the page header (optional, placeholder box when missing)
LOGO_PATH = os.getenv('RISKIFY_LOGO_PATH') or None

# Render limits (bound resource use against malformed or malicious payloads)
MAX_PAGES = int(os.getenv('RISKIFY_MAX_PAGES', '60'))
MAX_WORK_ACTIVITIES = int(os.getenv('RISKIFY_MAX_WORK_ACTIVITIES', '150'))
MAX_EQUIPMENT = int(os.getenv('RISKIFY_MAX_EQUIPMENT', '150'))

# Document options
SIGN_IN_ROWS = int(os.getenv('RISKIFY_SIGN_IN_ROWS', '15'))
RISK_SCALE = os.getenv('RISKIFY_RISK_SCALE', '5x5')
WATERMARK_ENABLED = os.getenv('RISKIFY_WATERMARK', 'true').lower() == 'true'

# Request configuration
MAX_CONTENT_LENGTH = int(os.getenv('MAX_CONTENT_LENGTH', str(2 * 1024 * 1024)))  # 2MB max JSON payload

# Logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

# Server
BACKEND_PORT = int(os.getenv('BACKEND_PORT', '5000'))
