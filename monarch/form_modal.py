"""Generic record entry modal screen."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Input, RadioButton, RadioSet, Static

from monarch.forms import FormError


@dataclass(frozen=True)
class FormField:
    """One form input. Fields with choices render as a radio set of (label, value)."""

    name: str
    placeholder: str
    value: str = ""
    choices: tuple[tuple[str, str], ...] = ()


class FormModal(ModalScreen[Any]):
    """Collect field values, parse them, and dismiss with the parsed result."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("ctrl+c", "close", "Close"),
    ]

    CSS = """
    FormModal {
        align: center middle;
        background: $background 60%;
    }

    #form-dialog {
        width: 56;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #form-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #form-dialog Input, #form-dialog RadioSet {
        margin-bottom: 1;
    }

    #form-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #form-help {
        color: #dddddd;
    }
    """

    def __init__(
        self,
        title: str,
        fields: list[FormField],
        parse: Callable[[Mapping[str, Any]], Any],
    ) -> None:
        super().__init__()
        self.title_text = title
        self.fields = fields
        self.parse = parse

    def compose(self) -> ComposeResult:
        with Container(id="form-dialog"):
            yield Static(self.title_text, id="form-title")
            for form_field in self.fields:
                if form_field.choices:
                    yield Static(form_field.placeholder)
                    yield RadioSet(
                        *(
                            RadioButton(label, value=(choice == form_field.value))
                            for label, choice in form_field.choices
                        ),
                        id=f"field-{form_field.name}",
                    )
                else:
                    yield Input(
                        value=form_field.value,
                        placeholder=form_field.placeholder,
                        id=f"field-{form_field.name}",
                    )
            yield Static(id="form-error")
            yield Static("Enter save. Esc cancel.", id="form-help")

    def on_mount(self) -> None:
        self.query_one(f"#field-{self.fields[0].name}").focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        event.stop()
        self._submit()

    def action_close(self) -> None:
        self.dismiss(None)

    def values(self) -> dict[str, str]:
        collected: dict[str, str] = {}
        for form_field in self.fields:
            if form_field.choices:
                pressed = self.query_one(f"#field-{form_field.name}", RadioSet).pressed_index
                collected[form_field.name] = form_field.choices[pressed][1] if pressed >= 0 else ""
            else:
                collected[form_field.name] = self.query_one(f"#field-{form_field.name}", Input).value
        return collected

    def _submit(self) -> None:
        try:
            result = self.parse(self.values())
        except FormError as exc:
            self.query_one("#form-error", Static).update(str(exc))
            return
        self.dismiss(result)
