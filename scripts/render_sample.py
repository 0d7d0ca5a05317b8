"""Render a rank card to a local PNG without starting the bot.

    python scripts/render_sample.py --xp 3255 --rank 4 --name Ghost --toy gem -o card.png
"""

import argparse
from pathlib import Path

from dotenv import load_dotenv

from rankcard.assets import Font, Toy
from rankcard.colors import Colors
from rankcard.context import RenderContext
from rankcard.errors import RenderError
from rankcard.renderer import CardRenderer
from utility.image_utils import to_data_uri
from utility.level_utils import build_level_info

load_dotenv()

COLOR_FIELDS = (
    "important",
    "secondary",
    "rank",
    "level",
    "border",
    "background",
    "progress_foreground",
    "progress_background",
)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Render a sample rank card.")
    parser.add_argument("--xp", type=int, default=3255)
    parser.add_argument("--rank", type=int, default=1)
    parser.add_argument("--name", default="Sample User")
    parser.add_argument("--discriminator", default="0")
    parser.add_argument("--font", default=Font.default().value, help="Font family")
    parser.add_argument("--toy", default=None, help="Toy sprite, e.g. gem")
    parser.add_argument("--avatar", type=Path, default=None, help="PNG file to use as avatar")
    for name in COLOR_FIELDS:
        parser.add_argument(f"--{name.replace('_', '-')}", dest=name, default=None)
    parser.add_argument("-o", "--output", type=Path, default=Path("card.png"))
    return parser.parse_args(argv)


def build_context(args) -> RenderContext:
    colors = Colors.from_record({name: getattr(args, name) for name in COLOR_FIELDS})
    avatar = ""
    if args.avatar:
        avatar = to_data_uri(args.avatar.read_bytes(), "image/png")
    return RenderContext.from_level_info(
        build_level_info(args.xp),
        rank=args.rank,
        name=args.name,
        discriminator=args.discriminator,
        avatar=avatar,
        colors=colors,
        font=Font.parse(args.font),
        toy=Toy.parse(args.toy) if args.toy else None,
    )


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        context = build_context(args)
    except (ValueError, TypeError) as e:
        print(f"❌ Bad card options: {e}")
        return 2

    print(f"Rendering level {context.level} card for {context.name}...")
    try:
        with CardRenderer(workers=1) as renderer:
            png = renderer.render_sync(context)
    except RenderError as e:
        print(f"❌ Render failed: {e}")
        return 1

    args.output.write_bytes(png)
    print(f"✅ Wrote {len(png)} bytes to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
