"""The course outline editor: modules, their chapters and their content items.

Every scope gets its own ReorderController, so a failed save in one
chapter's content never touches the order of a sibling chapter or of the
module list.
"""

from __future__ import annotations

from outline.config import ReorderSettings, load_settings
from outline.controller import ReorderController
from outline.errors import ReorderError, friendly_message
from outline.models import Scope, ScopeKind
from outline.notifications import Notifier
from outline.scheduling import ThreadingScheduler
from outline.store import ApiItemStore
from utils.logging_utils import reorder_logger, log_info


class CourseOutlineEditor:
    def __init__(self, course_id, store, scheduler=None, notifier=None, settings=None):
        self.course_id = course_id
        self.store = store
        self.settings = settings or ReorderSettings()
        self.scheduler = scheduler or ThreadingScheduler()
        self.notifier = notifier or Notifier()
        self.modules = self._new_controller(Scope(ScopeKind.MODULES, course_id))
        self._chapters = {}
        self._content = {}

    @classmethod
    def connect(cls, course_id, settings=None, session=None, **kwargs):
        """Build an editor talking to the outline service configured in the environment."""
        settings = settings or load_settings()
        store = ApiItemStore(settings.api_base_url, session=session, timeout=settings.request_timeout)
        return cls(course_id, store, settings=settings, **kwargs)

    def _new_controller(self, scope):
        return ReorderController(scope, self.store, scheduler=self.scheduler,
                                 notifier=self.notifier, settings=self.settings)

    def chapters(self, module_id) -> ReorderController:
        if module_id not in self._chapters:
            self._chapters[module_id] = self._new_controller(Scope(ScopeKind.CHAPTERS, module_id))
        return self._chapters[module_id]

    def content(self, chapter_id) -> ReorderController:
        if chapter_id not in self._content:
            self._content[chapter_id] = self._new_controller(Scope(ScopeKind.CONTENT, chapter_id))
        return self._content[chapter_id]

    def controllers(self):
        yield self.modules
        yield from self._chapters.values()
        yield from self._content.values()

    # --- Loading ---

    def load(self) -> bool:
        return self._fetch_into(self.modules)

    def open_module(self, module_id) -> ReorderController:
        controller = self.chapters(module_id)
        self._fetch_into(controller)
        return controller

    def open_chapter(self, chapter_id) -> ReorderController:
        controller = self.content(chapter_id)
        self._fetch_into(controller)
        return controller

    def refresh(self) -> bool:
        """Re-fetch every opened scope; busy scopes defer the new order."""
        results = [self._fetch_into(controller) for controller in list(self.controllers())]
        return all(results)

    def _fetch_into(self, controller) -> bool:
        try:
            items = self.store.fetch(controller.scope)
        except ReorderError as e:
            self.notifier.error(f"Failed to load {controller.label}", friendly_message(e))
            return False
        controller.initialize(items)
        return True

    # --- Moving chapters between modules ---

    def find_chapter_module(self, chapter_id):
        for module_id, controller in self._chapters.items():
            if any(item.id == chapter_id for item in controller.items):
                return module_id
        return None

    def move_chapter(self, chapter_id, target_module_id, target_index=None) -> bool:
        """Move a chapter into another module; waits for the store before updating anything."""
        source_module_id = self.find_chapter_module(chapter_id)
        try:
            self.store.move_chapter(chapter_id, target_module_id, target_index)
        except ReorderError as e:
            self.notifier.error("Failed to move chapter", friendly_message(e))
            return False

        log_info(reorder_logger, "Chapter moved", chapter_id=chapter_id,
                 source_module_id=source_module_id, target_module_id=target_module_id)
        if source_module_id is not None and source_module_id != target_module_id:
            self._fetch_into(self.chapters(source_module_id))
        self._fetch_into(self.chapters(target_module_id))
        self.notifier.success("Chapter moved")
        return True

    def close(self) -> None:
        for controller in self.controllers():
            controller.close()
