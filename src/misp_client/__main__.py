# MISP Client - Command Line Entry Point
#
# Thin argparse front end over MispClient. Connection settings come
# from flags, falling back to MISP_URL / MISP_API_KEY / MISP_INSECURE /
# MISP_TIMEOUT (optionally loaded from a .env file).

import argparse
import base64
import json
import os
import sys
from typing import Any, List, Optional

import structlog

from . import __version__
from .client import MispClient
from .config import ClientConfig
from .exceptions import MispError, MispStatusError
from .logging_config import configure_logging
from .models import AttributeQuery, SampleFile, SampleUpload, Sighting

log = structlog.get_logger("misp_client.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="misp-client",
        description="Query and update a MISP threat sharing instance",
    )
    parser.add_argument("--url", help="MISP base URL (default: $MISP_URL)")
    parser.add_argument("--key", help="MISP API key (default: $MISP_API_KEY)")
    parser.add_argument(
        "--insecure", action="store_true", default=None,
        help="Do not verify the server TLS certificate",
    )
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds")
    parser.add_argument("--env-file", help="Load settings from this .env file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every request")
    parser.add_argument("--json-logs", action="store_true", help="Emit logs as JSON")
    parser.add_argument("--version", action="version", version=f"misp-client {__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("event", help="Fetch an event")
    p.add_argument("event_id")

    p = sub.add_parser("attribute", help="Fetch an attribute")
    p.add_argument("attribute_id")

    p = sub.add_parser("search", help="Search attributes")
    p.add_argument("--value", default="")
    p.add_argument("--type", default="")
    p.add_argument("--category", default="")
    p.add_argument("--org", default="")
    p.add_argument("--tags", default="")
    p.add_argument("--from", dest="from_date", default="")
    p.add_argument("--to", dest="to_date", default="")
    p.add_argument("--last", default="")
    p.add_argument("--event-id", default="")
    p.add_argument("--uuid", default="")

    p = sub.add_parser("publish", help="Publish an event")
    p.add_argument("event_id")
    p.add_argument("--email", action="store_true", help="Alert subscribers by e-mail")

    p = sub.add_parser("tag", help="Attach a tag to an event or attribute")
    p.add_argument("uuid")
    p.add_argument("tag")

    p = sub.add_parser("sighting", help="Record a sighting")
    p.add_argument("values", nargs="+")
    p.add_argument("--timestamp", type=int, default=0)

    p = sub.add_parser("upload", help="Upload samples")
    p.add_argument("files", nargs="+")
    p.add_argument("--event-id", default="")
    p.add_argument("--info", default="", help="Info of a new event when no --event-id")
    p.add_argument("--category", default="")
    p.add_argument("--comment", default="")
    p.add_argument("--distribution", default="")
    p.add_argument("--to-ids", action="store_true")

    p = sub.add_parser("download", help="Download samples of an event")
    p.add_argument("event_id")
    group = p.add_mutually_exclusive_group(required=True)
    group.add_argument("--hash", dest="sample_hash", help="Sample hash")
    group.add_argument("--index", type=int, help="Sample index, starting at 0")
    group.add_argument("--pattern", help="File name pattern with %%d for every sample")
    p.add_argument("-o", "--output", help="Output file for --hash / --index")

    return parser


def _load_config(args: argparse.Namespace) -> ClientConfig:
    return ClientConfig.from_env(
        env_file=args.env_file,
        base_url=args.url,
        api_key=args.key,
        insecure=args.insecure,
        timeout=args.timeout,
    )


def _emit(data: Any) -> None:
    print(json.dumps(data, indent=2, sort_keys=True))


def _read_sample(path: str) -> SampleFile:
    with open(path, "rb") as fh:
        data = base64.b64encode(fh.read()).decode("ascii")
    return SampleFile(filename=os.path.basename(path), data=data)


def run(args: argparse.Namespace, client: MispClient) -> None:
    if args.command == "event":
        _emit(client.get_event(args.event_id).to_dict())

    elif args.command == "attribute":
        _emit(client.get_attribute(args.attribute_id).to_dict())

    elif args.command == "search":
        query = AttributeQuery(
            value=args.value, type=args.type, category=args.category,
            org=args.org, tags=args.tags, from_date=args.from_date,
            to_date=args.to_date, last=args.last, event_id=args.event_id,
            uuid=args.uuid,
        )
        _emit([attr.to_dict() for attr in client.search_attributes(query)])

    elif args.command == "publish":
        client.publish_event(args.event_id, email=args.email)
        log.info("event published", event_id=args.event_id, email=args.email)

    elif args.command == "tag":
        client.add_tag(args.uuid, args.tag)
        log.info("tag attached", uuid=args.uuid, tag=args.tag)

    elif args.command == "sighting":
        if len(args.values) == 1:
            sighting = Sighting(value=args.values[0], timestamp=args.timestamp)
        else:
            sighting = Sighting(values=args.values, timestamp=args.timestamp)
        _emit(client.add_sighting(sighting).raw)

    elif args.command == "upload":
        upload = SampleUpload(
            files=[_read_sample(path) for path in args.files],
            event_id=args.event_id, info=args.info, category=args.category,
            comment=args.comment, distribution=args.distribution,
            to_ids=args.to_ids,
        )
        result = client.upload_sample(upload)
        _emit({"id": result.id, "url": result.url, "message": result.message})

    elif args.command == "download":
        event = client.get_event(args.event_id)
        if args.pattern:
            written = event.download_all_samples(args.pattern)
            _emit(written)
            return
        if not args.output:
            raise MispError("--output is required with --hash or --index")
        if args.sample_hash:
            event.download_sample_by_hash(args.sample_hash, args.output)
        else:
            event.download_nth_sample(args.index, args.output)
        _emit([args.output])


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, json_output=args.json_logs)

    try:
        client = MispClient.from_config(_load_config(args))
        run(args, client)
    except MispStatusError as exc:
        print(f"error: {exc}\n{exc.body}", file=sys.stderr)
        return 1
    except MispError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
