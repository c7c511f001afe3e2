from dataclasses import dataclass
from typing import Any

import google_auth_httplib2
import httplib2
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build


@dataclass
class GoogleServices:
    """Discovery clients for the Google APIs one request touches."""
    docs: Any
    drive: Any
    slides: Any


def authorized_http(access_token: str) -> google_auth_httplib2.AuthorizedHttp:
    """Returns an httplib2 transport that sends the user's OAuth bearer token.

    The token comes from the browser and cannot be refreshed here, so
    refresh-on-401 is turned off and a 401 reaches the caller as-is.
    """
    credentials = Credentials(token=access_token)
    return google_auth_httplib2.AuthorizedHttp(
        credentials, http=httplib2.Http(), refresh_status_codes=()
    )


def build_services(access_token: str) -> GoogleServices:
    http = authorized_http(access_token)
    return GoogleServices(
        docs=build("docs", "v1", http=http, cache_discovery=False),
        drive=build("drive", "v3", http=http, cache_discovery=False),
        slides=build("slides", "v1", http=http, cache_discovery=False),
    )


def has_token(access_token) -> bool:
    return isinstance(access_token, str) and bool(access_token.strip())
