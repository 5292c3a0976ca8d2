"""
Editor Session
Explicitly passed editing state: active archetype, layout, labels, hidden
fields and theme, with load/save hooks at process boundaries
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Set

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from badgeforge.engine.archetypes import DEFAULT_THEMES, Archetype, Theme
from badgeforge.engine.labels import label_for, rename_label
from badgeforge.engine.layout import Layout
from badgeforge.engine.records import Record, remove_extra_field

logger = logging.getLogger(__name__)


class EditorSession(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    archetype: Archetype = Archetype.CONFERENCE
    layout: Layout = Field(default_factory=lambda: Layout.default_for(Archetype.CONFERENCE))
    custom_labels: Dict[str, str] = Field(default_factory=dict)
    hidden_fields: Set[str] = Field(default_factory=set)
    theme: Theme = Field(default_factory=lambda: DEFAULT_THEMES[0].model_copy())
    active_template_id: Optional[str] = None

    def select_archetype(self, archetype: Archetype) -> None:
        """Switch to an archetype's factory layout"""
        self.archetype = Archetype(archetype)
        self.layout = Layout.default_for(self.archetype)
        self.active_template_id = None

    def reset_to_default(self, archetype: Optional[Archetype] = None) -> None:
        """Factory reset: default layout, no custom labels or custom elements"""
        if archetype is not None:
            self.archetype = Archetype(archetype)
        self.layout.reset_to_default(self.archetype)
        self.custom_labels = {}

    def rename_label(self, key: str, new_label: Optional[str]) -> str:
        self.layout.get(key)
        self.custom_labels = rename_label(self.custom_labels, key, new_label)
        return label_for(key, self.custom_labels)

    def hide_field(self, key: str) -> None:
        self.hidden_fields = self.hidden_fields | {key}

    def show_field(self, key: str) -> None:
        self.hidden_fields = self.hidden_fields - {key}

    def delete_field(self, key: str, records: List[Record]) -> List[Record]:
        """
        Remove an element and its data everywhere.

        Record extras, the custom label and the hidden entry go first; the
        layout entry goes last so the element can never render half-deleted.
        """
        label = label_for(key, self.custom_labels)
        updated = remove_extra_field(records, label)

        labels = dict(self.custom_labels)
        labels.pop(key, None)
        self.custom_labels = labels
        self.hidden_fields = self.hidden_fields - {key, label}

        if key in self.layout:
            self.layout.remove_element(key)
        return updated

    def apply_template(
        self,
        template_id: str,
        base_archetype: Archetype,
        element_map: Dict[str, dict],
        custom_labels: Optional[Dict[str, str]] = None,
        theme: Optional[Theme] = None,
        counters: Optional[Dict[str, int]] = None,
    ) -> None:
        self.archetype = Archetype(base_archetype)
        self.layout = Layout.from_element_map(element_map, counters)
        self.custom_labels = dict(custom_labels or {})
        if theme is not None:
            self.theme = theme
        self.active_template_id = template_id

    def snapshot_for_save(self, name: str, icon: str = "default", visibility: str = "private") -> dict:
        """Wire payload for saving the current design as a template"""
        return {
            "name": name,
            "icon": icon,
            "baseTemplate": self.archetype.value,
            "layout": self.layout.to_element_map(),
            "elementCounters": self.layout.counters(),
            "theme": self.theme.model_dump(by_alias=True),
            "customLabels": dict(self.custom_labels),
            "visibility": visibility,
        }


class SessionStore(Protocol):
    def load(self) -> EditorSession:
        ...

    def save(self, session: EditorSession) -> None:
        ...


class JsonFileSessionStore:
    """Keeps one session as a JSON document on disk"""

    def __init__(self, path):
        self.path = Path(path)

    def load(self) -> EditorSession:
        if not self.path.exists():
            return EditorSession()
        try:
            return EditorSession.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (ValidationError, ValueError) as e:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, e)
            return EditorSession()

    def save(self, session: EditorSession) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = session.model_dump(mode="json", by_alias=True)
        payload["hiddenFields"] = sorted(payload.get("hiddenFields") or [])
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
