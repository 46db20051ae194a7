"""AWS SSM Parameter Store key provider."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

try:
    import boto3
    from botocore.exceptions import BotoCoreError, ClientError
except ImportError:
    boto3 = None

from ..constants import KEY_PATH_PREFIX
from ..exceptions import KeyNotFoundError, KeyProviderUnavailableError
from .base import KeyProvider, KeyType, key_path

logger = logging.getLogger(__name__)


class SsmKeyProvider(KeyProvider):
    """Resolves keys stored as Parameter Store parameters.

    Parameters are named ``<path_prefix>/<type>/<key_id>``. Private keys are
    usually ``SecureString`` parameters and are fetched with decryption.
    """

    def __init__(
        self,
        path_prefix: str = KEY_PATH_PREFIX,
        region_name: Optional[str] = None,
        profile_name: Optional[str] = None,
        client: Optional[Any] = None,
    ) -> None:
        if boto3 is None:
            raise ImportError("boto3 package is required for SsmKeyProvider")

        self.path_prefix = path_prefix
        self.region_name = region_name
        self.profile_name = profile_name
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            session_kwargs = {}
            if self.profile_name:
                session_kwargs["profile_name"] = self.profile_name
            session = boto3.Session(**session_kwargs)
            self._client = session.client("ssm", region_name=self.region_name)
        return self._client

    def _get_parameter(self, name: str, with_decryption: bool) -> str:
        response = self.client.get_parameter(Name=name, WithDecryption=with_decryption)
        return response["Parameter"]["Value"]

    async def get(self, key_type: KeyType, key_id: str, with_decryption: bool = False) -> str:
        name = key_path(key_type, key_id, self.path_prefix)
        logger.debug(f"Fetching parameter {name} (decrypt={with_decryption})")
        try:
            return await asyncio.to_thread(self._get_parameter, name, with_decryption)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code == "ParameterNotFound":
                raise KeyNotFoundError(key_type, key_id) from exc
            raise KeyProviderUnavailableError(f"SSM lookup for {name} failed: {code}") from exc
        except BotoCoreError as exc:
            raise KeyProviderUnavailableError(f"SSM lookup for {name} failed: {exc}") from exc
