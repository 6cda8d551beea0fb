"""
Terraform Enterprise API Client.

- core/: Configuration, exceptions and logging
- jsonapi: JSON:API codec for resource models
- request: Request descriptors and output sinks
- client: Client and request dispatch
"""

import logging

from tfe.client import Client, check_response_code
from tfe.core.config import DEFAULT_ADDRESS, Config, config_from_env, default_config
from tfe.core.exceptions import (
    ConfigError,
    DecodeError,
    EncodeError,
    NotFoundError,
    TFEError,
    TransportError,
    UnexpectedStatusError,
)
from tfe.jsonapi import MEDIA_TYPE, Resource, relation
from tfe.request import CollectionSink, Request, SingleSink

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "DEFAULT_ADDRESS",
    "MEDIA_TYPE",
    "Client",
    "CollectionSink",
    "Config",
    "ConfigError",
    "DecodeError",
    "EncodeError",
    "NotFoundError",
    "Request",
    "Resource",
    "SingleSink",
    "TFEError",
    "TransportError",
    "UnexpectedStatusError",
    "check_response_code",
    "config_from_env",
    "default_config",
    "relation",
]
