from __future__ import annotations
import argparse, json, logging, sys
from .binary.reader import iter_records, unpack_bytes
from .binary.codecs.field_plan import record_size
from .models.plan import FieldSpec, RecordPlan


def _load_plan(args) -> RecordPlan:
    if args.schema:
        plan = RecordPlan.from_json_file(args.schema)
    else:
        plan = RecordPlan()
    plan.fields.extend(FieldSpec.parse_token(tok) for tok in args.field or [])
    if not plan.fields:
        raise ValueError("no fields given; use --schema or --field")
    return plan


def _load_input(args) -> bytes | str:
    if args.hex:
        return bytes.fromhex(args.input.replace("0x", "").replace("_", ""))
    return args.input


def cmd_decode(args):
    if args.max_records is not None and not args.stream:
        raise ValueError("--max-records only applies with --stream")
    plan = _load_plan(args)
    data = _load_input(args)
    fields = plan.descriptors()

    if args.stream:
        out = list(iter_records(data, fields, max_records=args.max_records))
    else:
        out = unpack_bytes(data, fields)
    print(json.dumps(out, indent=2))


def cmd_fields(args):
    plan = _load_plan(args)
    offset = 0
    for f in plan.fields:
        print(f"{f.name:<24} bits {offset:>4}..{offset + f.bits - 1:<4} {f.kind.value}")
        offset += f.bits
    print(f"total_bits={plan.total_bits}, record_bytes={record_size(plan.descriptors())}")


def _add_plan_args(sp):
    sp.add_argument("--schema", help="JSON record plan: {\"name\": ..., \"fields\": [{\"name\", \"bits\", \"kind\"}]}")
    sp.add_argument("--field", action="append", metavar="NAME:BITS:KIND", help="Append a field (repeatable, in wire order)")


def build_parser():
    p = argparse.ArgumentParser(prog="bitunpack", description="Decode packed bit-field records")
    p.add_argument("-v", "--verbose", action="store_true", help="Log every field read")
    sub = p.add_subparsers(dest="cmd")

    sp = sub.add_parser("decode", help="decode a packed record and print it as JSON")
    sp.add_argument("input", help="Path to a binary file, or hex digits with --hex")
    sp.add_argument("--hex", action="store_true", help="Treat INPUT as hex digits instead of a path")
    sp.add_argument("--stream", action="store_true", help="Decode back-to-back byte-aligned records")
    sp.add_argument("--max-records", type=int, default=None, help="Stop after N records (requires --stream)")
    _add_plan_args(sp)
    sp.set_defaults(func=cmd_decode)

    sp = sub.add_parser("fields", help="print the bit layout of a record plan")
    _add_plan_args(sp)
    sp.set_defaults(func=cmd_fields)

    return p


def main(argv=None):
    p = build_parser()
    ns = p.parse_args(argv)
    if not hasattr(ns, "func"):
        p.print_help()
        return 2

    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        ns.func(ns)
    except (ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
