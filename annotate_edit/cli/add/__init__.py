# flake8: noqa E501

from gettext import gettext as _
from pathlib import Path

COMMAND_DESCRIPTION = _("Append one annotation to an image without opening a GUI")


def command(subparser):
    subparser.add_argument("image", type=Path)
    subparser.add_argument("kind", choices=["arrow", "rectangle", "text"])
    subparser.add_argument(
        "coords",
        type=float,
        nargs="+",
        help=_("x1 y1 x2 y2 for arrow/rectangle, x y for text (image pixels)"),
    )
    subparser.add_argument("-t", "--text", dest="content", type=str, help=_("Text content"))
    subparser.add_argument("-c", "--color", dest="color", default="#ff0000", help=_("Hex color"))
    subparser.add_argument("--thickness", dest="thickness", type=float, default=3.0)
    subparser.add_argument("--font-size", dest="font_size", type=float, default=20.0)
    subparser.add_argument(
        "--export",
        action="store_true",
        help=_("Also write the flattened image"),
    )

    def handle(args):
        from .add import handle as add_handle

        return add_handle(args)

    return handle
