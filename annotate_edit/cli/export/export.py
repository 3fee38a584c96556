import logging
from gettext import gettext as _

from annotate_edit.core.annotation import AnnotationSession
from annotate_edit.core.export import export_path

logger = logging.getLogger(__name__)


def handle(args):
    session = AnnotationSession()
    session.open_image(args.image)

    if session.image is None:
        logger.error(_("Could not decode image {image}").format(image=args.image))
        return 1

    output = args.output or export_path(
        args.image, session.cfg.export_suffix, session.cfg.export_extension
    )
    if output.exists() and not args.overwrite:
        logger.error(
            _("{output} already exists, use --overwrite to replace it").format(
                output=output
            )
        )
        return 1

    written = session.export(output)
    if written is None:
        return 1
    print(written)
    return 0
