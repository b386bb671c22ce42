# src/a11y_audit/services/fetch_service.py
import logging
import time
from typing import Any, Dict, Optional
from urllib.parse import urlparse, urlencode, urlunparse, parse_qsl

import requests
import urllib3
from urllib3.exceptions import InsecureRequestWarning

from ..model import FetchResult

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "a11y-audit/1.0 (+https://pypi.org/project/a11y-audit/)"
PROBE_PARAM = "a11y_probe"


class HttpFetchService:
    """
    Fetch adapter: retrieves one HTML document for the auditor.

    Certificate verification is off by default so hosts with self-signed or
    expired certificates can still be audited. Not for requests that carry
    credentials. No retries.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, session: Optional[requests.Session] = None):
        config = config or {}
        self.timeout = float(config.get('timeout', 20))
        self.max_redirects = int(config.get('max_redirects', 3))
        self.verify_ssl = bool(config.get('verify_ssl', False))
        self.user_agent = config.get('user_agent') or DEFAULT_USER_AGENT
        self.cache_bust = bool(config.get('cache_bust', True))

        self.session = session or requests.Session()
        self.session.max_redirects = self.max_redirects
        self.session.headers.update({
            'User-Agent': self.user_agent,
            'Accept': 'text/html,application/xhtml+xml;q=0.9,*/*;q=0.5',
        })

        if not self.verify_ssl:
            urllib3.disable_warnings(InsecureRequestWarning)

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def probe_url(self, url: str) -> str:
        """Appends a cache-busting query parameter so page caches serve fresh markup."""
        if not self.cache_bust:
            return url
        parsed = urlparse(url)
        query = parse_qsl(parsed.query, keep_blank_values=True)
        query.append((PROBE_PARAM, str(int(time.time()))))
        return urlunparse(parsed._replace(query=urlencode(query)))

    def fetch(self, url: str) -> FetchResult:
        if not url or not url.strip():
            return FetchResult(ok=False, error="Empty URL", code="empty_url")

        target = self.probe_url(url.strip())
        try:
            response = self.session.get(
                target,
                timeout=self.timeout,
                verify=self.verify_ssl,
                allow_redirects=True
            )
        except requests.exceptions.TooManyRedirects as e:
            return self._failure(url, f"Too many redirects (max {self.max_redirects}): {e}", "too_many_redirects")
        except requests.exceptions.Timeout as e:
            return self._failure(url, f"Request timed out after {self.timeout:g}s: {e}", "timeout")
        except requests.exceptions.ConnectionError as e:
            return self._failure(url, f"Connection failed: {e}", "connection_error")
        except requests.exceptions.RequestException as e:
            return self._failure(url, f"Request failed: {e}", "request_error")

        status = response.status_code
        if not 200 <= status < 300:
            return self._failure(url, f"HTTP status {status}", status, status=status)

        html = response.text
        if not html or not html.strip():
            return self._failure(url, "Empty HTML", "empty_body", status=status)

        logger.debug(f"Fetched {url} ({status}, {len(html)} chars)")
        return FetchResult(ok=True, html=html, status=status)

    @staticmethod
    def _failure(url: str, error: str, code, status: Optional[int] = None) -> FetchResult:
        logger.warning(f"Fetch failed for {url}: {error}")
        return FetchResult(ok=False, error=error, code=code, status=status)
