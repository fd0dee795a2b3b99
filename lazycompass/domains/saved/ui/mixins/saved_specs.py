"""Saving, running and clearing saved and inline queries/aggregations."""

from __future__ import annotations

import logging

from lazycompass.domains.editor.app.editor import is_editor_cancelled
from lazycompass.domains.editor.domain.actions import (
    PendingEditorAction,
    RunInlineAggregation,
    RunInlineQuery,
    SaveAggregation,
    SaveInlineAggregation,
    SaveInlineQuery,
    SaveQuery,
)
from lazycompass.domains.loading.domain.results import (
    COLLECTION_SOURCE,
    IDLE,
    CollectionSource,
    DocumentLoadReason,
    InlineAggregationSource,
    InlineQuerySource,
)
from lazycompass.domains.navigation.domain.screens import Screen
from lazycompass.domains.prompts.domain.overlay import (
    ConfirmOverlay,
    OverwriteAggregation,
    OverwriteQuery,
)
from lazycompass.domains.saved.domain.payloads import (
    InlineAggregationPayload,
    InlineDraft,
    InlineQueryPayload,
    parse_aggregation_payload_input,
    parse_aggregation_save_input,
    parse_inline_aggregation_payload,
    parse_inline_query_payload,
    parse_query_payload_input,
    parse_query_save_input,
    render_aggregation_payload_template,
    render_aggregation_save_template,
    render_inline_aggregation_template,
    render_inline_query_template,
    render_query_payload_template,
    render_query_save_template,
)
from lazycompass.domains.saved.domain.specs import (
    SHARED,
    SavedAggregation,
    SavedQuery,
    SavedScope,
    ScopedScope,
    default_saved_id,
    upsert_by_id,
)
from lazycompass.domains.saved.store.saved_specs import (
    saved_aggregation_path,
    saved_query_path,
    write_saved_aggregation,
    write_saved_query,
)
from lazycompass.shared.ui.protocols.session import SessionProtocol

logger = logging.getLogger(__name__)


class SavedSpecsMixin:
    """Mixin providing the saved spec and inline draft workflows."""

    # Save flow: pick a scope, then edit the payload

    def action_save_query(self: SessionProtocol) -> None:
        if self.screen is not Screen.DOCUMENTS:
            return
        if self.block_if_read_only("save queries"):
            return
        self.save_query_scope_index = 0
        self.screen = Screen.SAVE_QUERY_SCOPE_SELECT
        self.message = "select save mode for query"

    def action_save_aggregation(self: SessionProtocol) -> None:
        if self.screen is not Screen.DOCUMENTS:
            return
        if self.block_if_read_only("save aggregations"):
            return
        self.save_agg_scope_index = 0
        self.screen = Screen.SAVE_AGGREGATION_SCOPE_SELECT
        self.message = "select save mode for aggregation"

    def _scope_for_index(self: SessionProtocol, index: int | None) -> SavedScope | None:
        if index == 0:
            return SHARED
        if index == 1:
            _, database, collection = self.selected_context()
            return ScopedScope(database=database, collection=collection)
        return None

    def select_query_save_scope(self: SessionProtocol) -> None:
        scope = self._scope_for_index(self.save_query_scope_index)
        if scope is None:
            return
        self.screen = Screen.DOCUMENTS
        draft = self.inline_query_draft
        action: PendingEditorAction
        inline = isinstance(self.document_result_source, InlineQuerySource)
        if inline and draft is not None and draft.payload is not None:
            action = SaveInlineQuery(scope=scope, draft=draft)
        else:
            action = SaveQuery(template=SavedQuery(id=default_saved_id("query", scope), scope=scope))
        self.run_editor_action(action)

    def select_aggregation_save_scope(self: SessionProtocol) -> None:
        scope = self._scope_for_index(self.save_agg_scope_index)
        if scope is None:
            return
        self.screen = Screen.DOCUMENTS
        draft = self.inline_agg_draft
        action: PendingEditorAction
        inline = isinstance(self.document_result_source, InlineAggregationSource)
        if inline and draft is not None and draft.payload is not None:
            action = SaveInlineAggregation(scope=scope, draft=draft)
        else:
            action = SaveAggregation(
                template=SavedAggregation(id=default_saved_id("aggregation", scope), scope=scope)
            )
        self.run_editor_action(action)

    def save_query_with_template(self: SessionProtocol, template: SavedQuery) -> None:
        initial = render_query_payload_template(template)
        contents = self.open_editor("query", initial)
        if is_editor_cancelled(contents, initial):
            self.message = "cancelled"
            return
        query = parse_query_payload_input(contents, template)
        query.validate()
        self.store_saved_query(query)

    def save_aggregation_with_template(self: SessionProtocol, template: SavedAggregation) -> None:
        initial = render_aggregation_payload_template(template)
        contents = self.open_editor("aggregation", initial)
        if is_editor_cancelled(contents, initial):
            self.message = "cancelled"
            return
        aggregation = parse_aggregation_payload_input(contents, template)
        aggregation.validate()
        self.store_saved_aggregation(aggregation)

    def save_inline_query_with_draft(
        self: SessionProtocol,
        scope: SavedScope,
        draft: InlineDraft[InlineQueryPayload],
    ) -> None:
        payload = draft.payload or parse_inline_query_payload(draft.text)
        initial = render_query_save_template(default_saved_id("query", scope), payload)
        contents = self.open_editor("query", initial)
        if is_editor_cancelled(contents, initial):
            self.message = "cancelled"
            return
        query = parse_query_save_input(contents, scope)
        query.validate()
        self.store_saved_query(query)

    def save_inline_aggregation_with_draft(
        self: SessionProtocol,
        scope: SavedScope,
        draft: InlineDraft[InlineAggregationPayload],
    ) -> None:
        payload = draft.payload or parse_inline_aggregation_payload(draft.text)
        initial = render_aggregation_save_template(default_saved_id("aggregation", scope), payload)
        contents = self.open_editor("aggregation", initial)
        if is_editor_cancelled(contents, initial):
            self.message = "cancelled"
            return
        aggregation = parse_aggregation_save_input(contents, scope)
        aggregation.validate()
        self.store_saved_aggregation(aggregation)

    def store_saved_query(self: SessionProtocol, query: SavedQuery) -> None:
        """Write a new saved query, or ask before replacing an existing file."""
        if self.block_if_read_only("save queries"):
            return
        if saved_query_path(self.paths, query.id).exists():
            self.overlay = ConfirmOverlay(
                prompt=f"overwrite saved query '{query.id}'? (y/n)",
                action=OverwriteQuery(query),
            )
            return
        path = write_saved_query(self.paths, query)
        upsert_by_id(self.storage.queries, query)
        logger.info("saved query %s", query.id)
        self.message = f"saved query to {path}"

    def store_saved_aggregation(self: SessionProtocol, aggregation: SavedAggregation) -> None:
        if self.block_if_read_only("save aggregations"):
            return
        if saved_aggregation_path(self.paths, aggregation.id).exists():
            self.overlay = ConfirmOverlay(
                prompt=f"overwrite saved aggregation '{aggregation.id}'? (y/n)",
                action=OverwriteAggregation(aggregation),
            )
            return
        path = write_saved_aggregation(self.paths, aggregation)
        upsert_by_id(self.storage.aggregations, aggregation)
        logger.info("saved aggregation %s", aggregation.id)
        self.message = f"saved aggregation to {path}"

    # Run saved

    def action_run_saved_query(self: SessionProtocol) -> None:
        if self.screen is not Screen.DOCUMENTS:
            return
        if not self.storage.queries:
            self.message = "no saved queries"
            return
        self.saved_query_index = 0
        self.saved_query_state = IDLE
        self.screen = Screen.SAVED_QUERY_SELECT

    def action_run_saved_aggregation(self: SessionProtocol) -> None:
        if self.screen is not Screen.DOCUMENTS:
            return
        if not self.storage.aggregations:
            self.message = "no saved aggregations"
            return
        self.saved_agg_index = 0
        self.saved_agg_state = IDLE
        self.screen = Screen.SAVED_AGGREGATION_SELECT

    def action_clear_applied(self: SessionProtocol) -> None:
        if self.screen not in (Screen.DOCUMENTS, Screen.DOCUMENT_VIEW):
            return
        if isinstance(self.document_result_source, CollectionSource):
            return
        self.document_result_source = COLLECTION_SOURCE
        self.document_page = 0
        try:
            self.start_load_documents(None, DocumentLoadReason.REFRESH)
        except Exception as error:
            self.set_error(error)
            return
        self.message = "cleared applied saved results"

    # Inline drafts

    def action_run_inline_query(self: SessionProtocol) -> None:
        if self.screen is not Screen.DOCUMENTS:
            return
        try:
            self.run_editor_action(RunInlineQuery())
        except Exception as error:
            self.set_error(error)

    def action_run_inline_aggregation(self: SessionProtocol) -> None:
        if self.screen is not Screen.DOCUMENTS:
            return
        try:
            self.run_editor_action(RunInlineAggregation())
        except Exception as error:
            self.set_error(error)

    def run_inline_query_in_editor(self: SessionProtocol) -> None:
        previous = self.inline_query_draft
        initial = previous.text if previous is not None else render_inline_query_template()
        contents = self.open_editor("inline_query", initial)
        if is_editor_cancelled(contents, initial):
            self.message = "cancelled"
            return
        # Keep the raw text even if it does not parse.
        draft: InlineDraft[InlineQueryPayload] = InlineDraft(text=contents)
        self.inline_query_draft = draft
        draft.payload = parse_inline_query_payload(contents)
        self.start_execute_inline_query(draft.payload)

    def run_inline_aggregation_in_editor(self: SessionProtocol) -> None:
        previous = self.inline_agg_draft
        initial = previous.text if previous is not None else render_inline_aggregation_template()
        contents = self.open_editor("inline_aggregation", initial)
        if is_editor_cancelled(contents, initial):
            self.message = "cancelled"
            return
        draft: InlineDraft[InlineAggregationPayload] = InlineDraft(text=contents)
        self.inline_agg_draft = draft
        draft.payload = parse_inline_aggregation_payload(contents)
        self.start_execute_inline_aggregation(draft.payload)
