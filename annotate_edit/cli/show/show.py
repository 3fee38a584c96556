import logging
from gettext import gettext as _

from annotate_edit.core.annotation import AnnotationStore
from annotate_edit.core.annotation.state import Arrow, Rectangle
from annotate_edit.core.annotation.store import dump_annotations
from annotate_edit.utils.config import load_config

logger = logging.getLogger(__name__)


def describe(annotation) -> str:
    if isinstance(annotation, Arrow):
        return _("arrow {start} -> {end}, thickness {thickness:g}").format(
            start=annotation.start, end=annotation.end, thickness=annotation.thickness
        )
    if isinstance(annotation, Rectangle):
        return _("rectangle {min} - {max}, thickness {thickness:g}").format(
            min=annotation.min, max=annotation.max, thickness=annotation.thickness
        )
    return _("text {content!r} at {pos}, size {size:g}").format(
        content=annotation.content, pos=annotation.pos, size=annotation.font_size
    )


def handle(args):
    cfg = load_config()
    store = AnnotationStore.for_image(args.image, cfg.sidecar_extension)
    annotations = store.load()

    if args.as_json:
        print(dump_annotations(annotations))
        return 0

    if not annotations:
        print(_("No annotations for {image}").format(image=args.image))
        return 0

    for index, annotation in enumerate(annotations):
        print(f"{index:3d}  {describe(annotation)}")
    return 0
