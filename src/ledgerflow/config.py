"""
Central configuration for the ledgerflow pipeline.

Path resolution lives in ledgerflow.workspace.Workspace and user settings in
ledgerflow.model.settings. This module only holds constants shared across the
classifier, the resolvers and the REST client.
"""

DEFAULT_BASE_CURRENCY = "CNY"
DEFAULT_CATEGORY = "OTHER"
DEFAULT_CONFIDENCE = 0.95
DEFAULT_TIMEOUT_SECONDS = 30.0

# Account names the parser emits for credit cards end with one of these.
CREDIT_CARD_SUFFIXES = ("信用卡", "credit card")

# Income categories treated as recurring salary-like income.
FIXED_INCOME_CATEGORIES = ("SALARY", "HOUSING_FUND", "PENSION", "RENTAL")

ENV_DATA_DIR = "LEDGERFLOW_DATA"
ENV_API_URL = "LEDGERFLOW_API_URL"
ENV_API_TOKEN = "LEDGERFLOW_API_TOKEN"
