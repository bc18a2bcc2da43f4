import time
from typing import Optional

import keyring
import requests

from .client import StockbitClient, StockbitError, refresh_access_token
from .models import TokenBundle

# Constants
KEYRING_SERVICE = "stockgrabber"
ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"
EXPIRES_AT_KEY = "expires_at"
COOKIES_KEY = "cookies"


def _persist_tokens(bundle: TokenBundle, cookies: Optional[str] = None) -> None:
    """Save tokens and their expiry timestamp to keyring"""
    keyring.set_password(KEYRING_SERVICE, ACCESS_TOKEN_KEY, bundle.access_token)
    if bundle.refresh_token:
        keyring.set_password(KEYRING_SERVICE, REFRESH_TOKEN_KEY, bundle.refresh_token)
    expires_at = int(time.time()) + int(bundle.expires_in)
    keyring.set_password(KEYRING_SERVICE, EXPIRES_AT_KEY, str(expires_at))
    if cookies:
        keyring.set_password(KEYRING_SERVICE, COOKIES_KEY, cookies)


def _is_expired() -> bool:
    """Check the stored expiry. Tokens without a known expiry are assumed valid."""
    expires_at = keyring.get_password(KEYRING_SERVICE, EXPIRES_AT_KEY)
    if not expires_at:
        return False
    try:
        return time.time() >= int(expires_at)
    except ValueError:
        return False


def login(
    access_token: str,
    refresh_token: Optional[str] = None,
    cookies: Optional[str] = None,
    expires_in: int = 300,
    verbose: bool = False,
) -> StockbitClient:
    """
    Store the supplied tokens and return a client bound to the access token.

    Args:
        access_token: Bearer token copied from an authenticated browser session.
        refresh_token: Optional refresh token used to renew the access token.
        cookies: Optional session cookie string sent with every request.
        expires_in: Lifetime of the access token in seconds.
        verbose: If True, print status messages.
    """
    _persist_tokens(
        TokenBundle(access_token, refresh_token, expires_in), cookies=cookies
    )
    if verbose:
        print("✓ Tokens saved")
    return StockbitClient(access_token, cookies=cookies)


def refresh_session(verbose: bool = False) -> Optional[TokenBundle]:
    """Exchange the stored refresh token for a new token pair (single attempt).

    Returns the new TokenBundle, or None when no refresh token is stored or
    the exchange fails.
    """
    refresh_token = keyring.get_password(KEYRING_SERVICE, REFRESH_TOKEN_KEY)
    if not refresh_token:
        if verbose:
            print("No refresh token stored.")
        return None

    try:
        bundle = refresh_access_token(refresh_token)
    except (StockbitError, requests.RequestException) as e:
        print(f"✗ Token refresh failed: {e}")
        return None

    if not bundle.access_token:
        print("✗ Token refresh failed: no access token in response")
        return None

    _persist_tokens(bundle)
    if verbose:
        print(f"✓ Access token refreshed (expires in {bundle.expires_in}s)")
    return bundle


def get_authenticated_client(
    token: Optional[str] = None, verbose: bool = False
) -> Optional[StockbitClient]:
    """
    Build a client from an explicit token or the one stored by `login`.
    Returns None if no token is available.

    Args:
        token: Optional bearer token. Takes precedence over the stored one.
        verbose: If True, print status messages during authentication.
    """
    cookies = keyring.get_password(KEYRING_SERVICE, COOKIES_KEY)

    if token:
        if verbose:
            print("Using token from command line/environment")
        return StockbitClient(token, cookies=cookies)

    stored = keyring.get_password(KEYRING_SERVICE, ACCESS_TOKEN_KEY)
    if not stored:
        if verbose:
            print("No stored access token. Run 'stockgrabber login' first.")
        return None

    if _is_expired():
        if verbose:
            print("Stored access token expired, refreshing...")
        bundle = refresh_session(verbose=verbose)
        if bundle:
            stored = bundle.access_token

    if verbose:
        print("✓ Using stored access token")
    return StockbitClient(stored, cookies=cookies)


def logout(verbose: bool = False) -> None:
    """Clear all stored tokens."""
    cleared = False
    for key in (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, EXPIRES_AT_KEY, COOKIES_KEY):
        try:
            keyring.delete_password(KEYRING_SERVICE, key)
            cleared = True
        except keyring.errors.PasswordDeleteError:
            if verbose:
                print(f"No {key} stored")

    if cleared:
        print("✓ Cleared stored tokens")
    else:
        print("No stored tokens found.")
