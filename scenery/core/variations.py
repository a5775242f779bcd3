# scenery/core/variations.py
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from scenery.core.models import (
    DEFAULT_LABEL,
    ROLE_ERROR_MESSAGE,
    SceneryData,
    ValidationError,
    Variation,
)

logger = logging.getLogger(__name__)

FormInput = Union[Mapping[Any, Any], Iterable[Any]]


def _normalize_form_input(raw: FormInput) -> Dict[int, Variation]:
    """
    Turn submitted rows into {row index: Variation}.

    Rows may come as a mapping keyed by row index (ints or numeric strings,
    with gaps where rows were deleted) or as a plain sequence.
    """
    if isinstance(raw, Mapping):
        items = raw.items()
    else:
        items = enumerate(raw)
    rows: Dict[int, Variation] = {}
    for key, value in items:
        try:
            index = int(key)
        except (TypeError, ValueError):
            continue
        rows[index] = Variation.coerce(value)
    return dict(sorted(rows.items()))


def _row(rows: Dict[int, Variation], index: Any) -> Optional[Variation]:
    if index is None:
        return None
    try:
        return rows.get(int(index))
    except (TypeError, ValueError):
        return None


def _is_index(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class VariationStore:
    """
    Editable variation set of one scene.

    Lives only while the config form is open. Entry zero is the background
    (default) image; it is never part of `variations`.
    """

    def __init__(self, default_label: str = DEFAULT_LABEL):
        self.default_label = default_label
        self.background: Optional[str] = None
        self.gm_image: Optional[str] = None
        self.pl_image: Optional[str] = None
        self.variations: Optional[List[Variation]] = None

    def hydrate(
        self,
        prior: Optional[Union[SceneryData, Mapping[str, Any]]],
        default_image: str,
    ) -> None:
        """
        Fill unset fields from `prior` (or `default_image` when there is no
        prior data). Fields already set are left alone, so editor changes
        survive a second call.
        """
        if prior is not None and not isinstance(prior, SceneryData):
            prior = SceneryData.from_dict(prior)
        if not self.background:
            self.background = (prior.background if prior else "") or default_image
        if not self.gm_image:
            self.gm_image = (prior.gm_image if prior else "") or default_image
        if not self.pl_image:
            self.pl_image = (prior.pl_image if prior else "") or default_image
        if self.variations is None:
            self.variations = (
                [Variation(v.name, v.file) for v in prior.variations] if prior else []
            )

    def list_for_display(self) -> List[Variation]:
        rows = [Variation(self.default_label, self.background or "")]
        rows.extend(Variation(v.name, v.file) for v in self.variations or [])
        rows.append(Variation("", ""))
        return rows

    def add_variation(
        self, name: str = "", file: str = "", at_index: Optional[int] = None
    ) -> Variation:
        """
        Append, or insert before `at_index`. Valid positions are 0 through
        len(variations); anything else raises IndexError.
        """
        if self.variations is None:
            self.variations = []
        if at_index is None:
            at_index = len(self.variations)
        elif not _is_index(at_index) or not 0 <= at_index <= len(self.variations):
            raise IndexError(f"no insert position {at_index!r}")
        variation = Variation(name=name, file=file)
        self.variations.insert(at_index, variation)
        return variation

    def remove_variation(self, at_index: Any) -> Optional[Variation]:
        # the row may already be gone; that is not an error
        if (
            not self.variations
            or not _is_index(at_index)
            or not 0 <= at_index < len(self.variations)
        ):
            logger.debug("remove_variation: no row at %r", at_index)
            return None
        return self.variations.pop(at_index)

    def sync_from_display(self, rows: Iterable[Any]) -> None:
        """
        Take back rows as edited in the form (same shape as list_for_display).
        A trailing empty row is the placeholder and is dropped.
        """
        entries = [Variation.coerce(r) for r in rows]
        if not entries:
            return
        self.background = entries[0].file
        body = entries[1:]
        if body and not body[-1].file and not body[-1].name:
            body = body[:-1]
        self.variations = body

    def contains_file(self, file: str) -> bool:
        if not file:
            return False
        if file == self.background:
            return True
        return any(v.file == file for v in self.variations or [])

    def validate_and_build(
        self,
        raw_form_input: Optional[FormInput] = None,
        selected_gm_index: Any = 0,
        selected_pl_index: Any = None,
    ) -> SceneryData:
        """
        Build the data to persist from the submitted rows.

        Row 0 is the background. Later rows with an empty file are dropped and
        a file already listed is kept only once. Both roles resolve from the
        selected row; without `selected_pl_index` the GM selection drives the
        player view as well. Raises ValidationError when a role has no file;
        the store itself is never modified.
        """
        if raw_form_input is None:
            raw_form_input = self.list_for_display()
        rows = _normalize_form_input(raw_form_input)

        if selected_pl_index is None:
            selected_pl_index = selected_gm_index
        gm_row = _row(rows, selected_gm_index)
        pl_row = _row(rows, selected_pl_index)
        gm_image = gm_row.file if gm_row else ""
        pl_image = pl_row.file if pl_row else ""
        if not gm_image or not pl_image:
            raise ValidationError(ROLE_ERROR_MESSAGE)

        background_row = rows.get(0)
        background = background_row.file if background_row else ""

        variations: List[Variation] = []
        seen = set()
        for index, row in rows.items():
            if index == 0 or not row.file or row.file in seen:
                continue
            seen.add(row.file)
            variations.append(Variation(row.name, row.file))

        return SceneryData(
            background=background,
            variations=variations,
            gm_image=gm_image,
            pl_image=pl_image,
        )
