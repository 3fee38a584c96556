from gettext import gettext as _
from pathlib import Path

COMMAND_DESCRIPTION = _("Write a copy of the image with its annotations burned in")


def command(subparser):
    subparser.add_argument("image", type=Path, help=_("Annotated source image"))
    subparser.add_argument(
        "-o",
        "--output",
        type=Path,
        help=_("Where to write the flattened image (default: <stem>_annotated.png)"),
    )
    subparser.add_argument(
        "--overwrite",
        action="store_true",
        help=_("Overwrite the output file if it exists"),
    )

    def handle(args):
        from .export import handle as export_handle

        return export_handle(args)

    return handle
