import argparse
import json
import sys

from .config import PUBLISHED_CONFIG_PATH
from .errors import InvalidDescriptor
from .logging import configure_logging
from .orm import is_pivot_model, model_key_type, table_name
from .provider import publish_config


def cmd_publish_config(args):
    try:
        path = publish_config(args.path, force=args.force)
    except FileExistsError as e:
        print(f"[sidekick] {e}", file=sys.stderr)
        return 1
    print(f"[sidekick] settings written to {path}")
    return 0


def cmd_inspect(args):
    print(
        json.dumps(
            {
                "model": args.model,
                "table": table_name(args.model),
                "key_type": model_key_type(args.model).value,
                "pivot": is_pivot_model(args.model),
            }
        )
    )
    return 0


def main(argv=None):
    p = argparse.ArgumentParser(prog="model-sidekick")
    sub = p.add_subparsers(dest="cmd")

    pc = sub.add_parser("publish-config", help="Write default SIDEKICK_* settings to a file")
    pc.add_argument("--path", default=PUBLISHED_CONFIG_PATH)
    pc.add_argument("--force", action="store_true", help="Overwrite an existing file")
    pc.set_defaults(fn=cmd_publish_config)

    ins = sub.add_parser("inspect", help="Show table, key type and pivot flag for a model class")
    ins.add_argument("model", help="Import path, e.g. myapp.models:User")
    ins.set_defaults(fn=cmd_inspect)

    args = p.parse_args(argv)
    if not getattr(args, "cmd", None):
        p.print_help()
        return 1
    configure_logging()
    try:
        return args.fn(args)
    except InvalidDescriptor as e:
        print(f"[sidekick] error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
