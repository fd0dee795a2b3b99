"""Delete, copy and export actions on the current document set."""

from __future__ import annotations

import logging
from pathlib import Path

from lazycompass.domains.connections.store.security import write_secure_file
from lazycompass.domains.mongo.app.executor import DocumentDeleteSpec
from lazycompass.domains.mongo.domain.documents import document_id, format_bson, to_extended_json
from lazycompass.domains.navigation.domain.screens import Screen
from lazycompass.domains.prompts.domain.overlay import (
    DELETE_PHRASE,
    ConfirmOverlay,
    DeleteDocument,
    PathPromptOverlay,
)
from lazycompass.shared.ui.protocols.session import SessionProtocol

logger = logging.getLogger(__name__)

_DOCUMENT_SCREENS = (Screen.DOCUMENTS, Screen.DOCUMENT_VIEW)


class DocumentActionsMixin:
    """Mixin providing delete, copy and export."""

    def action_delete_document(self: SessionProtocol) -> None:
        if self.screen not in _DOCUMENT_SCREENS:
            return
        if self.block_if_read_only("delete documents"):
            return
        try:
            connection, database, collection = self.selected_context()
            doc_id = document_id(self.selected_document())
        except Exception as error:
            self.set_error(error)
            return
        prompt = (
            f"delete document {format_bson(doc_id)} "
            f"(Conn: {connection}, Db: {database}, Coll: {collection})"
        )
        spec = DocumentDeleteSpec(connection=connection, database=database, collection=collection, id=doc_id)
        self.overlay = ConfirmOverlay(
            prompt=prompt,
            action=DeleteDocument(spec=spec, return_to_documents=self.screen is Screen.DOCUMENT_VIEW),
            required=DELETE_PHRASE,
        )

    def action_copy_document(self: SessionProtocol) -> None:
        if self.screen not in _DOCUMENT_SCREENS:
            return
        try:
            document = self.selected_document()
            self.clipboard.copy(to_extended_json(document, indent=2))
        except Exception as error:
            self.set_error(error)
            return
        if "_id" in document:
            self.message = f"copied document {format_bson(document['_id'])}"
        else:
            self.message = "copied document"

    def action_export_documents(self: SessionProtocol) -> None:
        if self.screen not in _DOCUMENT_SCREENS:
            return
        if not self.documents:
            self.message = "no documents to export"
            return
        self.overlay = PathPromptOverlay()

    def export_documents(self: SessionProtocol, path: str) -> None:
        target = Path(path).expanduser()
        write_secure_file(target, to_extended_json(self.documents, indent=2) + "\n")
        logger.info("exported %d document(s) to %s", len(self.documents), target)
        self.message = f"exported {len(self.documents)} document(s) to {target}"
