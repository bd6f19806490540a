# focusflow/services/google_auth.py
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Iterable, Optional, Sequence

from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from core.logs import get_logger
from core.settings import CALENDAR, CLIENT_SECRET_PATH, TOKEN_PATH


SCOPES = list(CALENDAR.scopes)

logger = get_logger("google.auth")


class GoogleAuth:
    """OAuth credentials for the read-only calendar preview."""

    def __init__(
        self,
        secrets_path: str | Path = CLIENT_SECRET_PATH,
        token_path: str | Path = TOKEN_PATH,
        scopes: Sequence[str] = SCOPES,
    ):
        self.secrets_path = Path(secrets_path)
        self.token_path = Path(token_path)
        self.scopes = list(scopes)
        self.creds: Optional[Credentials] = None

    @property
    def has_client_secret(self) -> bool:
        return self.secrets_path.exists()

    def load_cached(self) -> Optional[Credentials]:
        """Use the stored token if it is still usable; never opens a browser."""
        if self.creds and self.creds.valid:
            return self.creds
        if not self.token_path.exists():
            return None
        try:
            creds = Credentials.from_authorized_user_file(str(self.token_path), self.scopes)
        except (ValueError, json.JSONDecodeError) as exc:
            logger.warning("Failed to load %s: %s", self.token_path.name, exc)
            self.reset_credentials()
            return None
        if not self._has_required_scopes(creds):
            logger.info("Cached token is missing calendar scopes")
            self.reset_credentials()
            return None
        if not creds.valid:
            if not (creds.expired and creds.refresh_token):
                return None
            try:
                creds.refresh(Request())
            except RefreshError as exc:
                logger.warning("Token refresh failed: %s", exc)
                self.reset_credentials()
                return None
            self._persist_credentials(creds)
        self.creds = creds
        return creds

    def ensure_credentials(self) -> Credentials:
        if self.load_cached() is not None:
            return self.creds

        if not self.secrets_path.exists():
            raise FileNotFoundError(
                f"{self.secrets_path} not found. Create a Desktop OAuth client in "
                "Google Cloud and download its JSON."
            )
        flow = InstalledAppFlow.from_client_secrets_file(str(self.secrets_path), self.scopes)
        logger.info("Running OAuth consent flow (local server)")
        creds = flow.run_local_server(port=0, access_type="offline", prompt="consent")
        if not creds or not self._has_required_scopes(creds):
            raise RuntimeError("Google authorization did not grant calendar access")

        self.creds = creds
        self._persist_credentials(creds)
        self._log_active_scopes(creds.scopes)
        return creds

    def get_credentials(self) -> Optional[Credentials]:
        return self.creds

    def reset_credentials(self) -> None:
        self.creds = None
        try:
            if self.token_path.exists():
                self.token_path.unlink()
                logger.info("Removed cached Google token")
        except OSError as exc:
            logger.warning("Failed to remove cached token: %s", exc)

    # ----- helpers -----
    def _persist_credentials(self, creds: Credentials) -> None:
        self.token_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.token_path.with_suffix(".tmp")
        try:
            tmp_path.write_text(creds.to_json(), encoding="utf-8")
            os.replace(tmp_path, self.token_path)
        finally:
            if tmp_path.exists():
                try:
                    tmp_path.unlink()
                except OSError:
                    pass

    def _has_required_scopes(self, creds: Credentials) -> bool:
        current = set(creds.scopes or [])
        return all(scope in current for scope in self.scopes)

    def _log_active_scopes(self, scopes: Iterable[str] | None) -> None:
        scopes_list = sorted(set(scopes or []))
        logger.info("Active scopes: %s", ", ".join(scopes_list) if scopes_list else "-")


__all__ = ["GoogleAuth", "SCOPES"]
