"""
Spotify token storage.

Tokens are obtained out of band (the browser login flow is not part of this
application) and stored in ``<data_dir>/user_tokens.json``.
"""

import json
import os
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

TOKEN_URL = "https://accounts.spotify.com/api/token"
TOKENS_FILE = "user_tokens.json"
ACCESS_TOKEN_ENV = "SPOTIFY_ACCESS_TOKEN"


def load_user_tokens(data_dir: Path) -> Optional[Dict[str, Any]]:
    """Load OAuth tokens, preferring an access token from the environment.

    An environment token has no expiry or refresh token and is used as is.
    """
    env_token = os.environ.get(ACCESS_TOKEN_ENV)
    if env_token:
        logger.debug(f"Using Spotify access token from {ACCESS_TOKEN_ENV}")
        return {"access_token": env_token}

    tokens_file = data_dir / TOKENS_FILE
    if not tokens_file.exists():
        return None

    try:
        with open(tokens_file) as f:
            return json.load(f)
    except Exception as e:
        logger.warning(f"Failed to load Spotify tokens from file: {e}")
        return None


def save_user_tokens(data_dir: Path, token_data: Dict[str, Any]) -> None:
    """Save OAuth tokens to file with owner-only permissions."""
    data_dir.mkdir(parents=True, exist_ok=True)
    tokens_file = data_dir / TOKENS_FILE

    with open(tokens_file, "w") as f:
        json.dump(token_data, f, indent=2)

    tokens_file.chmod(0o600)
    logger.debug(f"Saved Spotify tokens to {tokens_file}")


def is_token_expired(token_data: Dict[str, Any]) -> bool:
    """Check if token is expired (with 5-minute buffer)."""
    if "expires_at" not in token_data:
        return True

    expires_at = datetime.fromisoformat(token_data["expires_at"])
    buffer = timedelta(minutes=5)

    return datetime.now() >= (expires_at - buffer)


def with_expiry(token_data: Dict[str, Any], refresh_token: str) -> Dict[str, Any]:
    """Stamp a token response with ``expires_at``.

    Spotify may omit the refresh token when it has not rotated; the previous
    one is kept in that case.
    """
    expires_at = datetime.now() + timedelta(seconds=token_data.get("expires_in", 3600))
    return {"refresh_token": refresh_token, **token_data, "expires_at": expires_at.isoformat()}
