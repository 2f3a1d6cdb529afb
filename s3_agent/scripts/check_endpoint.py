#!/usr/bin/env python3
"""Build an S3 agent from flags/environment and optionally probe the endpoint."""

import argparse
import sys
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path

from botocore.exceptions import BotoCoreError, ClientError

from s3_agent.lib.agent import S3Agent, StorageClientFactory, new_s3_agent
from s3_agent.lib.config import AgentConfig, read_root_ca
from s3_agent.lib.exceptions import S3AgentError
from s3_agent.lib.logging_config import LOGGER


def build_config(args: argparse.Namespace) -> AgentConfig:
    """Merge command-line flags over the S3_* environment variables."""
    config = AgentConfig.from_env(load_root_ca=args.root_ca is None)
    overrides: dict[str, object] = {}
    if args.endpoint is not None:
        overrides["endpoint"] = args.endpoint
    if args.access_key is not None:
        overrides["access_key"] = args.access_key
    if args.secret_key is not None:
        overrides["secret_key"] = args.secret_key
    if args.root_ca is not None:
        overrides["root_ca"] = read_root_ca(args.root_ca)
    return replace(config, **overrides)


def probe(agent: S3Agent) -> int:
    """List buckets through the agent and return how many were visible."""
    response = agent.client.list_buckets()
    return len(response.get("Buckets", []))


def main(
    argv: Sequence[str] | None = None,
    client_factory: StorageClientFactory | None = None,
) -> int:
    """Build an S3 agent and report the outcome.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = argparse.ArgumentParser(
        description="Build an S3 client for an S3-compatible endpoint"
    )
    parser.add_argument("--endpoint", help="Endpoint URL (default: $S3_ENDPOINT)")
    parser.add_argument("--access-key", help="Access key (default: $S3_ACCESS_KEY)")
    parser.add_argument("--secret-key", help="Secret key (default: $S3_SECRET_KEY)")
    parser.add_argument(
        "--root-ca",
        type=Path,
        help="PEM file with the CA to trust (default: $S3_ROOT_CA_FILE)",
    )
    parser.add_argument(
        "--probe",
        action="store_true",
        help="Call ListBuckets to check credentials and connectivity",
    )
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
        agent = new_s3_agent(config, client_factory=client_factory)
    except S3AgentError as e:
        LOGGER.error("S3 agent construction failed: %s", e)
        return 1

    if not args.probe:
        return 0

    try:
        bucket_count = probe(agent)
    except (BotoCoreError, ClientError) as e:
        LOGGER.error("Probe of %s failed: %s", agent.endpoint, e)
        return 1

    LOGGER.info(
        "Probe of %s succeeded, %d buckets visible",
        agent.endpoint,
        bucket_count,
        extra={"endpoint": agent.endpoint, "bucket_count": bucket_count},
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
