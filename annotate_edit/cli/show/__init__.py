from pathlib import Path
from gettext import gettext as _

COMMAND_DESCRIPTION = _("List the annotations stored beside an image")


def command(subparser):
    subparser.add_argument("image", type=Path)
    subparser.add_argument(
        "--json",
        dest="as_json",
        action="store_true",
        help=_("Print the raw sidecar document"),
    )

    def handle(args):
        from .show import handle as show_handle

        return show_handle(args)

    return handle
