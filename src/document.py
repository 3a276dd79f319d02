# Shapekit
# Copyright 2025 - Ricardo Quesada

import logging
from typing import Any, Self

import toml

from shape import Shape, create_shape

logger = logging.getLogger(__name__)


class ShapeDocument:
    """
    A collection of shapes keyed by id, in insertion order.

    It is the persistence side of the shapes: it stores their serialized
    records and gives them back to the shapes on load, using
    update(..., is_deserializing=True) for the shapes it already holds.
    """

    def __init__(self):
        self._shapes: dict[str, Shape] = {}
        self._filename: str | None = None

    @classmethod
    def from_dict(cls, d: dict) -> Self:
        document = cls()
        document.apply_records(d.get("shapes", {}))
        return document

    def to_dict(self) -> dict:
        shapes = {}
        for shape_id, shape in self._shapes.items():
            serialized = shape.serialized
            if serialized is None:
                # Drafts are not committed yet
                continue
            shapes[shape_id] = serialized
        return {"shapes": shapes}

    def apply_records(self, records: dict[str, dict[str, Any]]) -> None:
        for key, record in records.items():
            if "type" not in record:
                logger.error(f"Record {key} has no type, skipping it")
                continue
            shape = self._shapes.get(record.get("id", key))
            if shape is not None and shape.type == record["type"]:
                shape.update(record, is_deserializing=True)
                continue
            try:
                shape = create_shape(record)
            except ValueError as e:
                logger.error(f"Cannot create shape from record {key}: {e}")
                continue
            if key != shape.id:
                logger.error(f"Dictionary key {key} does not match shape id {shape.id}")
            self._shapes[shape.id] = shape

    @classmethod
    def load_from_filename(cls, filename: str) -> Self | None:
        logger.info(f"Loading document from filename {filename}")
        try:
            with open(filename, "r", encoding="utf-8") as f:
                d = toml.load(f)
        except FileNotFoundError as e:
            logger.error(f"Could not load file from {filename}, error: {e}")
            return None
        except toml.TomlDecodeError as e:
            logger.error(f"Failed to load document from {filename}, error: {e}")
            return None
        document = cls.from_dict(d)
        document._filename = filename
        return document

    def save_to_filename(self, filename: str) -> None:
        logger.info(f"Saving document to filename {filename}")
        if filename is None:
            return
        self._filename = filename

        d = self.to_dict()
        try:
            with open(filename, "w", encoding="utf-8") as f:
                toml.dump(d, f)
        except FileNotFoundError as e:
            logger.error(f"Could not save file to {filename}, error: {e}")

    def add_shape(self, shape: Shape) -> None:
        if shape.id in self._shapes:
            logger.warning(f"Shape {shape.id} already in document, replacing it")
        self._shapes[shape.id] = shape

    def remove_shape(self, shape: Shape) -> None:
        if shape.id not in self._shapes:
            logger.error(f"Cannot remove shape {shape.id}. It does not belong to this document")
            return
        del self._shapes[shape.id]

    def get_shape(self, shape_id: str) -> Shape | None:
        return self._shapes.get(shape_id)

    @property
    def shapes(self) -> list[Shape]:
        return list(self._shapes.values())

    @property
    def filename(self) -> str | None:
        return self._filename
