# ABOUTME: Field-by-field merge of locally read metadata with an online lookup result.
# ABOUTME: Blanks are filled from the remote record; real conflicts are settled by the user.

import copy
import logging

from bookwarden.core.interaction import NonInteractive, UserInteraction
from bookwarden.metadata.fields import (
    InvalidFieldValueError,
    MetadataField,
    format_field,
    get_field,
    set_field,
)
from bookwarden.metadata.types import BookMetadata

logger = logging.getLogger(__name__)


def merge_metadata(
    local: BookMetadata,
    remote: BookMetadata,
    interaction: UserInteraction | None = None,
) -> BookMetadata:
    """Return a new BookMetadata combining ``local`` and ``remote``.

    Tags are unioned. For every other editable field, an empty side takes
    the other side's value, and differing values go to
    ``interaction.choose``, which may also return an edited value. Without
    an interaction the local value wins.
    Identifiers are unioned, local entries first.
    """
    interaction = interaction or NonInteractive()
    merged = copy.deepcopy(local)

    for field in MetadataField:
        if field is MetadataField.TAGS:
            merged.tags = list(dict.fromkeys([*local.tags, *remote.tags]))
            continue

        local_value = get_field(local, field)
        remote_value = get_field(remote, field)
        if not remote_value or local_value == remote_value:
            continue
        if not local_value:
            setattr(merged, field.value, copy.deepcopy(remote_value))
            continue

        local_text = format_field(local, field)
        remote_text = format_field(remote, field)
        if local_text.casefold() == remote_text.casefold():
            continue
        chosen = interaction.choose(field.value, local_text, remote_text)
        if chosen == local_text:
            continue
        if chosen == remote_text:
            logger.debug("Using remote %s: %r", field.value, remote_text)
            setattr(merged, field.value, copy.deepcopy(remote_value))
            continue
        try:
            set_field(merged, field, chosen)
        except InvalidFieldValueError as exc:
            logger.warning("Ignoring edited %s: %s", field.value, exc)

    merged.identifiers = {**remote.identifiers, **local.identifiers}
    return merged
