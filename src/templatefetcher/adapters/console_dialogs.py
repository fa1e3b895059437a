"""Terminal implementation of the dialogs port."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, TextIO

from templatefetcher.domain.errors import UnsupportedTransportError, UriValidationError
from templatefetcher.domain.template import Template, TemplateKind
from templatefetcher.domain.uri import Uri
from templatefetcher.ports.dialogs import Dialogs, SelectTemplateOptions
from templatefetcher.ports.template_store import TemplateStore

DEFAULT_DISCARDED_LEADING_DIRECTORIES = 1
DEPTH_ERROR = (
    "The directory depth must be a positive integer. "
    "It indicates how many leading directories must be discarded"
)

InputFn = Callable[[str], str]


class DialogCancelled(Exception):
    pass


class ConsoleDialogs(Dialogs):
    def __init__(
        self,
        store: TemplateStore,
        *,
        input_fn: InputFn | None = None,
        output: TextIO | None = None,
    ) -> None:
        self._store = store
        self._input = input_fn or input
        self._output = output or sys.stderr

    def select_template(self, options: SelectTemplateOptions) -> Template | None:
        selection = self._store.get_templates()
        for error in selection.invalid_template_errors:
            self._say(error)
        templates = [
            template
            for template in selection.valid_templates.values()
            if options.filter is None or options.filter(template)
        ]
        if not templates:
            self._say("No template to show off")
            return None
        self._say(options.place_holder)
        for index, template in enumerate(templates, start=1):
            self._say(f"  {index}. {template.name} ({template.uri})")
        while True:
            try:
                choice = self._ask("Template number or name: ")
            except DialogCancelled:
                return None
            if not choice:
                return None
            if choice.isdigit() and 1 <= int(choice) <= len(templates):
                return templates[int(choice) - 1]
            for template in templates:
                if template.name == choice:
                    return template
            self._say(f"Enter a value between 1 and {len(templates)} or a template name.")

    def confirm_directory_depth(self, current: int) -> int:
        while True:
            try:
                answer = self._ask(f"How many leading directories must be discarded ? [{current}] ")
            except DialogCancelled:
                return current
            if not answer:
                return current
            depth = _parse_depth(answer)
            if depth is None:
                self._say(DEPTH_ERROR)
                continue
            return depth

    def new_template(self) -> Template | None:
        try:
            name = self._ask_template_name()
            kind = self._ask_template_kind()
            uri = self._ask_uri()
            depth = self._ask_discarded_leading_directories(kind)
        except DialogCancelled:
            return None
        return Template.create(
            name,
            uri,
            is_archive=kind is TemplateKind.ARCHIVE,
            discarded_leading_directories=depth,
        )

    def ask_cache_path(self) -> Path | None:
        try:
            answer = self._ask("Directory where template caches will be saved in: ")
        except DialogCancelled:
            return None
        if not answer:
            return None
        return Path(answer).expanduser()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ask_template_name(self) -> str:
        while True:
            name = self._ask("Enter your template name: ")
            if not name:
                self._say("A template name can not be empty")
            elif name in self._store.get_templates().valid_templates:
                self._say(f"The template '{name}' already exist")
            else:
                return name

    def _ask_template_kind(self) -> TemplateKind:
        choices = {"d": TemplateKind.DIRECTORY, "f": TemplateKind.FILE, "a": TemplateKind.ARCHIVE}
        while True:
            answer = self._ask("What is your template type ? [d]irectory, [f]ile, [a]rchive: ").lower()
            if not answer:
                raise DialogCancelled()
            kind = choices.get(answer[0])
            if kind is not None:
                return kind
            self._say("Answer with directory, file or archive")

    def _ask_uri(self) -> str:
        while True:
            uri = self._ask("Enter a non empty URI (path, file://, http(s)://, ftp://): ")
            if not uri:
                self._say("An URI can not be empty")
                continue
            try:
                Uri.parse(uri)
            except UnsupportedTransportError:
                self._say("The used protocol is not supported (file, ftp, http and https are supported)")
            except UriValidationError as exc:
                self._say(str(exc))
            else:
                return uri

    def _ask_discarded_leading_directories(self, kind: TemplateKind) -> int:
        if kind is TemplateKind.FILE:
            return 0
        while True:
            answer = self._ask(
                f"How many leading directories must be discarded ? (default is {DEFAULT_DISCARDED_LEADING_DIRECTORIES}) "
            )
            if not answer:
                return DEFAULT_DISCARDED_LEADING_DIRECTORIES
            depth = _parse_depth(answer)
            if depth is None:
                self._say(DEPTH_ERROR)
                continue
            return depth

    def _ask(self, prompt: str) -> str:
        try:
            return self._input(prompt).strip()
        except (EOFError, KeyboardInterrupt) as exc:
            raise DialogCancelled() from exc

    def _say(self, message: str) -> None:
        print(message, file=self._output)


def _parse_depth(raw: str) -> int | None:
    try:
        depth = int(raw)
    except ValueError:
        return None
    return depth if depth >= 0 else None


__all__ = ["ConsoleDialogs", "DEFAULT_DISCARDED_LEADING_DIRECTORIES"]
