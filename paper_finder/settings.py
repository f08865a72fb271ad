"""Configuration settings for the paper finder."""

import logging
import os
from dotenv import load_dotenv

load_dotenv()

# Logging setup
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)

# Sent with every provider request
USER_AGENT = os.getenv("PAPER_FINDER_USER_AGENT", "Research-Paper-Finder/1.0")

# Paper providers (all queried anonymously)
SEMANTIC_SCHOLAR_BASE_URL = "https://api.semanticscholar.org/graph/v1"
PUBMED_EUTILS_BASE_URL = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"
DOAJ_BASE_URL = "https://doaj.org/api"
CORE_BASE_URL = "https://api.core.ac.uk/v3"
BASE_SEARCH_URL = "https://api.base-search.net/cgi-bin/BaseHttpSearchInterface.fcgi"

# Rate limiting settings
SEMANTIC_SCHOLAR_REQUESTS_PER_SECOND = float(
    os.getenv("SEMANTIC_SCHOLAR_REQUESTS_PER_SECOND", "1.0")
)
ARXIV_RATE_LIMIT_SECONDS = float(os.getenv("ARXIV_RATE_LIMIT_SECONDS", "3.0"))

# OpenRouter
# Available models via OpenRouter:
# - meta-llama/llama-3.3-70b-instruct (default)
# - anthropic/claude-3-5-sonnet (balanced)
OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY")
OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
OPENROUTER_DEFAULT_MODEL = os.getenv(
    "OPENROUTER_DEFAULT_MODEL", "meta-llama/llama-3.3-70b-instruct"
)

# Anthropic (direct API)
ANTHROPIC_API_KEY = os.getenv("ANTHROPIC_API_KEY")
ANTHROPIC_DEFAULT_MODEL = os.getenv("ANTHROPIC_DEFAULT_MODEL", "claude-3-haiku-20240307")
