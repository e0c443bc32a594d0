import argparse
import sys
from pathlib import Path

from .config import load_config, merge_config
from .renderers import list_outputs
from .transformer import MathTransform


def _pages(site: Path, extension: str) -> list[Path]:
    """Files under *site* (or *site* itself) whose name ends in *extension*."""
    if site.is_file():
        return [site]
    return sorted(p for p in site.rglob(f"*{extension}") if p.is_file())


def main() -> None:
    """CLI entry point: typeset the math in every page of a built site, in place."""
    outputs = list_outputs()
    parser = argparse.ArgumentParser(
        prog="mathpress",
        description="Typeset TeX math in generated HTML pages",
    )
    parser.add_argument("site", type=Path, help="Built site directory or a single HTML file")
    parser.add_argument(
        "-c", "--config", type=Path, default=None, help="Path to mathpress.yaml (optional)"
    )
    parser.add_argument(
        "-o",
        "--output",
        type=str,
        choices=outputs,
        default=None,
        help=f"Output mode (choices: {', '.join(outputs)}; default: from config, else svg)",
    )
    parser.add_argument(
        "--extension",
        type=str,
        default=None,
        help="Only rewrite files ending in this extension (default: .html)",
    )

    args = parser.parse_args()

    if not args.site.exists():
        print(f"Error: '{args.site}' not found.", file=sys.stderr)
        sys.exit(1)
    if args.config is not None and not args.config.exists():
        print(f"Error: config '{args.config}' not found.", file=sys.stderr)
        sys.exit(1)

    overrides = {}
    if args.output is not None:
        overrides["output"] = args.output
    if args.extension is not None:
        overrides["extension"] = args.extension

    try:
        config = merge_config(load_config(args.config), overrides)
        transform = MathTransform(config)
    except (TypeError, ValueError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        sys.exit(1)

    pages = _pages(args.site, config.extension)
    changed = 0
    for page in pages:
        if not transform.handles(page):
            continue
        try:
            document = transform.render(page.read_text(encoding="utf-8"))
        except Exception as exc:
            print(f"Typesetting '{page}' failed: {exc}", file=sys.stderr)
            sys.exit(1)
        # pages without math are left byte for byte as they were
        if document.math:
            page.write_text(document.serialize(), encoding="utf-8")
            changed += 1

    print(f"Typeset {changed} of {len(pages)} page(s) in '{args.site}'")


if __name__ == "__main__":
    main()
