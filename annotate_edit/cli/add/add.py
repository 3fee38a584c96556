import logging
from gettext import gettext as _

from annotate_edit.core.annotation import (
    AnnotationSession,
    Arrow,
    EventType,
    Rectangle,
    Text,
)
from annotate_edit.core.annotation.utils import color_from_hex

logger = logging.getLogger(__name__)

EXPECTED_COORDS = {"arrow": 4, "rectangle": 4, "text": 2}


def build_annotation(args, session: AnnotationSession):
    expected = EXPECTED_COORDS[args.kind]
    if len(args.coords) != expected:
        raise ValueError(
            _("{kind} needs {expected} coordinates, got {got}").format(
                kind=args.kind, expected=expected, got=len(args.coords)
            )
        )
    session.set_color(color_from_hex(args.color))
    session.set_thickness(args.thickness)
    session.set_font_size(args.font_size)

    if args.kind == "text":
        return Text(
            pos=tuple(args.coords),
            content=args.content or "",
            font_size=session.font_size,
            color=session.color,
        )
    start, end = tuple(args.coords[:2]), tuple(args.coords[2:])
    if args.kind == "arrow":
        return Arrow(start=start, end=end, color=session.color, thickness=session.thickness)
    return Rectangle(min=start, max=end, color=session.color, thickness=session.thickness)


def handle(args):
    session = AnnotationSession()
    session.open_image(args.image)
    save_failures = []
    session.events.on(EventType.SAVE_FAILED, save_failures.append)

    try:
        annotation = build_annotation(args, session)
        index = session.add_annotation(annotation)
    except ValueError as e:
        logger.error(str(e))
        return 1

    if save_failures:
        return 1
    print(_("Added {kind} #{index} to {path}").format(
        kind=args.kind, index=index, path=session.store.path
    ))

    if args.export and session.export() is None:
        return 1
    return 0
