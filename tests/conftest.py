"""Shared pytest fixtures for siteaudit tests."""

import pytest
from dotenv import load_dotenv

from siteaudit.core.config import Settings


def pytest_sessionstart(session):
    """Load environment variables from a local .env file, if any."""
    load_dotenv()


PROVIDER_ENV_VARS = (
    "KEYWORDS_EVERYWHERE_API_KEY",
    "VALUESERP_API_KEY",
    "COMPANIES_HOUSE_API_KEY",
    "SUGGESTIONS_ENABLED",
    "DISABLED_PROVIDERS",
)


@pytest.fixture
def clean_provider_env(monkeypatch):
    """Remove provider credentials so tests never reach a real API."""
    for name in PROVIDER_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield monkeypatch


@pytest.fixture
def offline_settings(clean_provider_env):
    return Settings()


@pytest.fixture
def legal_html():
    return """
<html>
<head>
  <title>Smith Solicitors | Conveyancing and Probate in Leeds</title>
  <meta property="og:site_name" content="Smith Solicitors">
</head>
<body>
  <nav>
    <ul>
      <li><a href="/conveyancing">Conveyancing</a></li>
      <li><a href="/solicitors/probate">Probate</a></li>
      <li><a href="/contact">Contact</a></li>
    </ul>
  </nav>
  <h1>Smith Solicitors</h1>
  <p>Smith Solicitors is a firm of local solicitors in Leeds. Every solicitor on our team
     handles conveyancing and probate matters.</p>
  <p>We offer conveyancing, probate services and estate planning.</p>
  <p>Our conveyancing solicitor will guide you through your property purchase.
     Speak to a solicitor about probate today.</p>
  <footer>&copy; 2024 Smith Solicitors. All rights reserved.</footer>
</body>
</html>
"""


@pytest.fixture
def restaurant_html():
    return """
<html>
<head>
  <title>The Olive Tree</title>
  <script type="application/ld+json">
  {"@context": "https://schema.org", "@type": "Restaurant", "name": "The Olive Tree",
   "servesCuisine": "Mediterranean"}
  </script>
</head>
<body>
  <h1>The Olive Tree restaurant</h1>
  <p>Marketing partners: digital marketing, seo, ppc, branding, social media marketing,
     marketing agency, advertising, marketing strategy and more marketing.</p>
</body>
</html>
"""


@pytest.fixture
def acme_html():
    return """
<html>
<head>
  <title>Acme | Home</title>
  <meta property="og:site_name" content="Acme Co">
</head>
<body>
  <h1>Welcome</h1>
  <p>Acme Co makes widgets.</p>
</body>
</html>
"""
