"""Word and PowerPoint documents exposed as translation hosts."""

from __future__ import annotations

import copy
import pathlib
from abc import abstractmethod
from typing import Any, Callable, Dict, List, Sequence, Tuple

from .errors import (
    AttributeUnavailable,
    PagewrightError,
    ResourceNotFound,
    UnsupportedFileTypeError,
)
from .host import Character, DocumentHost, Paragraph, ResourceTable, TextSpan
from .paragraphs import clean_paragraph_text
from .structures import Direction, Justification, Swatch


def _import_docx():
    try:
        import docx  # type: ignore
    except ImportError as exc:  # pragma: no cover - import guard
        raise PagewrightError(
            "python-docx is required to process .docx files. "
            "Install it with `pip install python-docx`."
        ) from exc
    return docx


def _import_pptx():
    try:
        import pptx  # type: ignore
    except ImportError as exc:  # pragma: no cover - import guard
        raise PagewrightError(
            "python-pptx is required to process .pptx files. "
            "Install it with `pip install python-pptx`."
        ) from exc
    return pptx


def _unavailable(key: str, fmt: str) -> Callable[..., Any]:
    def _raise(*_args: Any) -> Any:
        raise AttributeUnavailable(f"{key} is not supported in {fmt} documents.")

    return _raise


class RunCharacter(Character):
    """One character of a run; style writes land on the whole run."""

    def __init__(self, paragraph: "OfficeParagraph", run: Any, char: str) -> None:
        self._paragraph = paragraph
        self._run = run
        self._char = char

    @property
    def text(self) -> str:
        return self._char

    def read(self, key: str) -> Any:
        return self._paragraph.read_run(self._run, key)

    def write(self, key: str, value: Any) -> None:
        self._paragraph.write_run(self._run, key, value)


class OfficeParagraph(Paragraph):
    """A paragraph view whose characters are derived from its runs."""

    readers: Dict[str, Callable[[Any, Any], Any]] = {}
    writers: Dict[str, Callable[[Any, Any, Any], None]] = {}
    properties: Dict[str, Callable[[Any, Any], None]] = {}

    def __init__(self, paragraph: Any) -> None:
        self.paragraph = paragraph

    def runs(self) -> Sequence[Any]:
        return self.paragraph.runs

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs())

    def characters(self) -> List[RunCharacter]:
        return [
            RunCharacter(self, run, char)
            for run in self.runs()
            for char in run.text
        ]

    def read_run(self, run: Any, key: str) -> Any:
        try:
            reader = self.readers[key]
        except KeyError:
            raise AttributeUnavailable(f"Unknown attribute '{key}'.") from None
        return reader(self.paragraph, run)

    def write_run(self, run: Any, key: str, value: Any) -> None:
        try:
            writer = self.writers[key]
        except KeyError:
            raise AttributeUnavailable(f"Unknown attribute '{key}'.") from None
        writer(self.paragraph, run, value)

    def set_property(self, name: str, value: Any) -> None:
        try:
            setter = self.properties[name]
        except KeyError:
            raise AttributeUnavailable(
                f"Paragraph property '{name}' is not supported."
            ) from None
        setter(self.paragraph, value)


class OfficeSpan(TextSpan):
    """All paragraphs of one text container (body, cell, frame, notes)."""

    paragraph_break = "\n"
    paragraph_view: type = OfficeParagraph

    def __init__(self, container: Any, location: str, owner: Any = None) -> None:
        self.container = container
        self._location = location
        self.owner = owner if owner is not None else container

    @property
    def location(self) -> str:
        return self._location

    @property
    def contents(self) -> str:
        return self.paragraph_break.join(paragraph.text for paragraph in self.paragraphs())

    def paragraphs(self) -> List[OfficeParagraph]:
        return [self.paragraph_view(paragraph) for paragraph in self.container.paragraphs]

    def replace_contents(self, text: str) -> None:
        """Reuse paragraph elements in order; clone or drop at the tail."""

        existing = list(self.container.paragraphs)
        parts = text.split(self.paragraph_break)
        previous = None
        for index, part in enumerate(parts):
            if index < len(existing):
                paragraph = existing[index]
            elif previous is None:
                paragraph = self.container.add_paragraph()
            else:
                paragraph = self._clone_after(previous)
            self._rewrite(paragraph, part, cloned=index >= len(existing))
            previous = paragraph
        for paragraph in existing[len(parts):]:
            element = self._element_of(paragraph)
            element.getparent().remove(element)

    def _rewrite(self, paragraph: Any, text: str, *, cloned: bool = False) -> None:
        view = self.paragraph_view(paragraph)
        if not cloned and clean_paragraph_text(view.text) == clean_paragraph_text(text):
            return
        runs = list(view.runs())
        template = None
        if runs:
            rPr = runs[0]._r.rPr
            template = copy.deepcopy(rPr) if rPr is not None else None
        self._clear_text(paragraph, runs, keep_objects=not cloned)
        self._append_run(paragraph, text, template)

    def _clone_after(self, previous: Any) -> Any:
        element = self._element_of(previous)
        clone = copy.deepcopy(element)
        element.addnext(clone)
        return type(previous)(clone, previous._parent)

    @staticmethod
    @abstractmethod
    def _element_of(paragraph: Any) -> Any:
        """The paragraph's XML element."""

    @abstractmethod
    def _clear_text(
        self, paragraph: Any, runs: Sequence[Any], *, keep_objects: bool = True
    ) -> None:
        """Remove text runs and line breaks; embedded objects stay if asked."""

    @abstractmethod
    def _append_run(self, paragraph: Any, text: str, template: Any) -> None:
        """Add a single run holding ``text`` with the template properties."""


def _replace_rPr(r: Any, template: Any) -> None:
    if template is None:
        return
    current = r.rPr
    if current is not None:
        r.remove(current)
    r.insert(0, template)


class BaseDocumentHandler(DocumentHost):
    """Common base class for document handlers."""

    def __init__(self, source_path: pathlib.Path):
        self.source_path = source_path
        self.interaction_suppressed = False

    @abstractmethod
    def text_containers(self) -> List[OfficeSpan]:
        """Every text container in document order."""

    @abstractmethod
    def _write(self, destination: pathlib.Path) -> None:
        """Persist the document."""

    def enable_interaction_suppression(self) -> None:
        self.interaction_suppressed = True

    def disable_interaction_suppression(self) -> None:
        self.interaction_suppressed = False

    def save(self, destination: pathlib.Path) -> None:
        if self.interaction_suppressed:
            raise PagewrightError("Cannot save while a span is being rewritten.")
        self._write(destination)


# --- Word -----------------------------------------------------------------

_RPR_ORDER: Tuple[str, ...] = (
    "w:rStyle", "w:rFonts", "w:b", "w:bCs", "w:i", "w:iCs", "w:caps",
    "w:smallCaps", "w:strike", "w:dstrike", "w:outline", "w:shadow",
    "w:emboss", "w:imprint", "w:noProof", "w:snapToGrid", "w:vanish",
    "w:webHidden", "w:color", "w:spacing", "w:w", "w:kern", "w:position",
    "w:sz", "w:szCs", "w:highlight", "w:u", "w:effect", "w:bdr", "w:shd",
    "w:fitText", "w:vertAlign", "w:rtl", "w:cs", "w:em", "w:lang",
    "w:eastAsianLayout", "w:specVanish", "w:oMath",
)
_PPR_ORDER: Tuple[str, ...] = (
    "w:pStyle", "w:keepNext", "w:keepLines", "w:pageBreakBefore", "w:framePr",
    "w:widowControl", "w:numPr", "w:suppressLineNumbers", "w:pBdr", "w:shd",
    "w:tabs", "w:suppressAutoHyphens", "w:kinsoku", "w:wordWrap",
    "w:overflowPunct", "w:topLinePunct", "w:autoSpaceDE", "w:autoSpaceDN",
    "w:bidi", "w:adjustRightInd", "w:snapToGrid", "w:spacing", "w:ind",
    "w:contextualSpacing", "w:mirrorIndents", "w:suppressOverlap", "w:jc",
    "w:textDirection", "w:textAlignment", "w:textboxTightWrap",
    "w:outlineLvl", "w:divId", "w:cnfStyle", "w:rPr", "w:sectPr", "w:pPrChange",
)


def _w_val(parent: Any, tag: str) -> str | None:
    from docx.oxml.ns import qn

    if parent is None:
        return None
    child = parent.find(qn(tag))
    if child is None:
        return None
    return child.get(qn("w:val"))


def _set_w_val(parent: Any, tag: str, order: Sequence[str], value: str) -> None:
    from docx.oxml import OxmlElement
    from docx.oxml.ns import qn

    child = parent.find(qn(tag))
    if child is None:
        child = OxmlElement(tag)
        parent.insert_element_before(child, *order[order.index(tag) + 1:])
    child.set(qn("w:val"), value)


def _docx_color(paragraph: Any, run: Any) -> Swatch | None:
    rgb = run.font.color.rgb
    if rgb is None:
        return None
    return Swatch(str(rgb), rgb)


def _docx_set_color(paragraph: Any, run: Any, swatch: Any) -> None:
    from docx.shared import RGBColor

    value = getattr(swatch, "value", None)
    if not isinstance(value, RGBColor):
        raise AttributeUnavailable(f"{swatch!r} is not an RGB swatch.")
    run.font.color.rgb = value


def _docx_point_size(paragraph: Any, run: Any) -> float | None:
    size = run.font.size
    return None if size is None else size.pt


def _docx_set_point_size(paragraph: Any, run: Any, value: Any) -> None:
    from docx.shared import Pt

    run.font.size = Pt(float(value))


def _docx_rpr_number(tag: str, scale: float) -> Callable[[Any, Any], float | None]:
    def _read(paragraph: Any, run: Any) -> float | None:
        raw = _w_val(run._r.rPr, tag)
        if raw is None:
            return None
        return float(raw.rstrip("%")) / scale

    return _read


def _docx_set_rpr_number(tag: str, scale: float) -> Callable[[Any, Any, Any], None]:
    def _write(paragraph: Any, run: Any, value: Any) -> None:
        rPr = run._r.get_or_add_rPr()
        _set_w_val(rPr, tag, _RPR_ORDER, str(int(round(float(value) * scale))))

    return _write


def _font_flag(attr: str) -> Callable[[Any, Any], Any]:
    return lambda paragraph, run: getattr(run.font, attr)


def _set_font_flag(attr: str) -> Callable[[Any, Any, Any], None]:
    def _write(paragraph: Any, run: Any, value: Any) -> None:
        setattr(run.font, attr, value)

    return _write


def _docx_set_bidi(paragraph: Any, value: Any) -> None:
    flag = "1" if value is Direction.RIGHT_TO_LEFT else "0"
    _set_w_val(paragraph._p.get_or_add_pPr(), "w:bidi", _PPR_ORDER, flag)


def _docx_set_run_direction(paragraph: Any, value: Any) -> None:
    flag = "1" if value is Direction.RIGHT_TO_LEFT else "0"
    for run in paragraph.runs:
        _set_w_val(run._r.get_or_add_rPr(), "w:rtl", _RPR_ORDER, flag)


def _docx_set_alignment(paragraph: Any, value: Any) -> None:
    from docx.enum.text import WD_ALIGN_PARAGRAPH

    paragraph.alignment = (
        WD_ALIGN_PARAGRAPH.RIGHT
        if value is Justification.RIGHT_ALIGN
        else WD_ALIGN_PARAGRAPH.LEFT
    )


def _docx_set_leading(paragraph: Any, run: Any, value: Any) -> None:
    paragraph.paragraph_format.line_spacing = value


def _docx_set_paragraph_style(paragraph: Any, run: Any, style: Any) -> None:
    paragraph.style = style


def _docx_set_character_style(paragraph: Any, run: Any, style: Any) -> None:
    run.style = style


def _docx_set_font(paragraph: Any, run: Any, name: Any) -> None:
    run.font.name = name


class DocxParagraph(OfficeParagraph):
    readers = {
        "fillColor": _docx_color,
        "strokeColor": _unavailable("strokeColor", "Word"),
        "font": lambda paragraph, run: run.font.name,
        "pointSize": _docx_point_size,
        "leading": lambda paragraph, run: paragraph.paragraph_format.line_spacing,
        "tracking": _docx_rpr_number("w:spacing", 1.0),
        "horizontalScale": _docx_rpr_number("w:w", 1.0),
        "verticalScale": _unavailable("verticalScale", "Word"),
        "baselineShift": _docx_rpr_number("w:position", 2.0),
        "skew": _unavailable("skew", "Word"),
        "underline": _font_flag("underline"),
        "strikethrough": _font_flag("strike"),
        "allCaps": _font_flag("all_caps"),
        "smallCaps": _font_flag("small_caps"),
        "superscript": _font_flag("superscript"),
        "subscript": _font_flag("subscript"),
        "paragraphStyleName": lambda paragraph, run: paragraph.style.name,
        "characterStyleName": lambda paragraph, run: run.style.name,
    }
    writers = {
        "fillColor": _docx_set_color,
        "strokeColor": _unavailable("strokeColor", "Word"),
        "font": _docx_set_font,
        "pointSize": _docx_set_point_size,
        "leading": _docx_set_leading,
        "tracking": _docx_set_rpr_number("w:spacing", 1.0),
        "horizontalScale": _docx_set_rpr_number("w:w", 1.0),
        "verticalScale": _unavailable("verticalScale", "Word"),
        "baselineShift": _docx_set_rpr_number("w:position", 2.0),
        "skew": _unavailable("skew", "Word"),
        "underline": _set_font_flag("underline"),
        "strikethrough": _set_font_flag("strike"),
        "allCaps": _set_font_flag("all_caps"),
        "smallCaps": _set_font_flag("small_caps"),
        "superscript": _set_font_flag("superscript"),
        "subscript": _set_font_flag("subscript"),
        "paragraphStyleName": _docx_set_paragraph_style,
        "characterStyleName": _docx_set_character_style,
    }
    properties = {
        "paragraphDirection": _docx_set_bidi,
        "direction": _docx_set_run_direction,
        "justification": _docx_set_alignment,
    }


class DocxSpan(OfficeSpan):
    paragraph_view = DocxParagraph

    @staticmethod
    def _element_of(paragraph: Any) -> Any:
        return paragraph._p

    def _clear_text(
        self, paragraph: Any, runs: Sequence[Any], *, keep_objects: bool = True
    ) -> None:
        for run in runs:
            if keep_objects and run._r.xpath("./w:drawing | ./w:pict | ./w:object"):
                continue
            run._r.getparent().remove(run._r)

    def _append_run(self, paragraph: Any, text: str, template: Any) -> None:
        run = paragraph.add_run(text)
        _replace_rPr(run._r, template)


class DocxResources(ResourceTable):
    def __init__(self, document: Any) -> None:
        self.document = document

    def font(self, name: str) -> str:
        if not name or not name.strip():
            raise ResourceNotFound("Empty font name.")
        return name

    def color(self, name: str) -> Swatch:
        from docx.shared import RGBColor

        try:
            return Swatch(name.upper(), RGBColor.from_string(name.upper()))
        except ValueError:
            raise ResourceNotFound(f"No color named '{name}'.") from None

    def colors(self) -> List[Swatch]:
        return []

    def _style(self, name: str, style_type: Any, kind: str) -> Any:
        try:
            style = self.document.styles[name]
        except KeyError:
            raise ResourceNotFound(f"No {kind} style named '{name}'.") from None
        if style.type != style_type:
            raise ResourceNotFound(f"Style '{name}' is not a {kind} style.")
        return style

    def paragraph_style(self, name: str) -> Any:
        from docx.enum.style import WD_STYLE_TYPE

        return self._style(name, WD_STYLE_TYPE.PARAGRAPH, "paragraph")

    def character_style(self, name: str) -> Any:
        from docx.enum.style import WD_STYLE_TYPE

        return self._style(name, WD_STYLE_TYPE.CHARACTER, "character")


class DocxDocumentHandler(BaseDocumentHandler):
    """Exposes the body, table cells, headers and footers of a Word document."""

    def __init__(self, source_path: pathlib.Path):
        super().__init__(source_path)
        docx = _import_docx()
        self.document = docx.Document(str(source_path))
        self._resources = DocxResources(self.document)

    @property
    def resources(self) -> DocxResources:
        return self._resources

    def text_containers(self) -> List[OfficeSpan]:
        spans: List[OfficeSpan] = [
            DocxSpan(self.document._body, "Body", owner=self.document)
        ]
        spans.extend(self._table_spans(self.document.tables, "Table"))
        for s_idx, section in enumerate(self.document.sections):
            for name, container in (("header", section.header), ("footer", section.footer)):
                if container.is_linked_to_previous:
                    continue
                label = f"Section {s_idx + 1} {name}"
                spans.append(DocxSpan(container, label, owner=section))
                spans.extend(self._table_spans(container.tables, f"{label} table"))
        return spans

    def _table_spans(self, tables: Sequence[Any], label: str) -> List[OfficeSpan]:
        spans: List[OfficeSpan] = []
        processed_cells = set()
        for t_idx, table in enumerate(tables):
            for r_idx, row in enumerate(table.rows):
                for c_idx, cell in enumerate(row.cells):
                    cell_key = id(cell._tc)  # type: ignore[attr-defined]
                    if cell_key in processed_cells:
                        continue
                    processed_cells.add(cell_key)
                    location = (
                        f"{label} {t_idx + 1}, row {r_idx + 1}, column {c_idx + 1}"
                    )
                    spans.append(DocxSpan(cell, location, owner=table))
        return spans

    def _write(self, destination: pathlib.Path) -> None:
        self.document.save(str(destination))


# --- PowerPoint -------------------------------------------------------------


def _pptx_font(run: Any) -> Any:
    """The run font, or None when the run carries no rPr.

    ``_Run.font`` adds an empty rPr on access, so reads go through here.
    """

    if run._r.rPr is None:
        return None
    return run.font


def _pptx_font_attr(attr: str) -> Callable[[Any, Any], Any]:
    def _read(paragraph: Any, run: Any) -> Any:
        font = _pptx_font(run)
        return None if font is None else getattr(font, attr)

    return _read


def _pptx_color(paragraph: Any, run: Any) -> Swatch | None:
    from pptx.enum.dml import MSO_COLOR_TYPE, MSO_FILL

    font = _pptx_font(run)
    if font is None:
        return None
    fill = font.fill
    if fill.type != MSO_FILL.SOLID:
        return None
    color = fill.fore_color
    if color.type == MSO_COLOR_TYPE.RGB:
        return Swatch(str(color.rgb), color.rgb)
    if color.type == MSO_COLOR_TYPE.SCHEME:
        return Swatch(color.theme_color.name, color.theme_color)
    return None


def _pptx_set_color(paragraph: Any, run: Any, swatch: Any) -> None:
    from pptx.dml.color import RGBColor
    from pptx.enum.dml import MSO_THEME_COLOR

    value = getattr(swatch, "value", None)
    if isinstance(value, RGBColor):
        run.font.color.rgb = value
    elif isinstance(value, MSO_THEME_COLOR):
        run.font.color.theme_color = value
    else:
        raise AttributeUnavailable(f"{swatch!r} is not a PowerPoint color.")


def _pptx_point_size(paragraph: Any, run: Any) -> float | None:
    font = _pptx_font(run)
    size = None if font is None else font.size
    return None if size is None else size.pt


def _pptx_set_point_size(paragraph: Any, run: Any, value: Any) -> None:
    from pptx.util import Pt

    run.font.size = Pt(float(value))


def _pptx_tracking(paragraph: Any, run: Any) -> float | None:
    raw = run._r.rPr.get("spc") if run._r.rPr is not None else None
    return None if raw is None else int(raw) / 100.0


def _pptx_set_tracking(paragraph: Any, run: Any, value: Any) -> None:
    run._r.get_or_add_rPr().set("spc", str(int(round(float(value) * 100))))


def _pptx_attr(paragraph: Any, run: Any, name: str) -> str | None:
    rPr = run._r.rPr
    return None if rPr is None else rPr.get(name)


def _pptx_strike(paragraph: Any, run: Any) -> bool | None:
    raw = _pptx_attr(paragraph, run, "strike")
    return None if raw is None else raw != "noStrike"


def _pptx_set_strike(paragraph: Any, run: Any, value: Any) -> None:
    run._r.get_or_add_rPr().set("strike", "sngStrike" if value else "noStrike")


def _pptx_caps(mode: str) -> Callable[[Any, Any], bool | None]:
    def _read(paragraph: Any, run: Any) -> bool | None:
        raw = _pptx_attr(paragraph, run, "cap")
        return None if raw is None else raw == mode

    return _read


def _pptx_set_caps(mode: str) -> Callable[[Any, Any, Any], None]:
    def _write(paragraph: Any, run: Any, value: Any) -> None:
        rPr = run._r.get_or_add_rPr()
        if value:
            rPr.set("cap", mode)
        elif rPr.get("cap") == mode:
            rPr.set("cap", "none")

    return _write


def _pptx_script(sign: int) -> Callable[[Any, Any], bool | None]:
    def _read(paragraph: Any, run: Any) -> bool | None:
        raw = _pptx_attr(paragraph, run, "baseline")
        if raw is None:
            return None
        return int(raw) * sign > 0

    return _read


def _pptx_set_script(sign: int) -> Callable[[Any, Any, Any], None]:
    def _write(paragraph: Any, run: Any, value: Any) -> None:
        rPr = run._r.get_or_add_rPr()
        if value:
            rPr.set("baseline", str(30000 * sign))
        elif rPr.get("baseline") is not None and int(rPr.get("baseline")) * sign > 0:
            del rPr.attrib["baseline"]

    return _write


def _pptx_set_rtl(paragraph: Any, value: Any) -> None:
    flag = "1" if value is Direction.RIGHT_TO_LEFT else "0"
    paragraph._p.get_or_add_pPr().set("rtl", flag)


def _pptx_set_alignment(paragraph: Any, value: Any) -> None:
    from pptx.enum.text import PP_ALIGN

    paragraph.alignment = (
        PP_ALIGN.RIGHT if value is Justification.RIGHT_ALIGN else PP_ALIGN.LEFT
    )


def _pptx_set_leading(paragraph: Any, run: Any, value: Any) -> None:
    paragraph.line_spacing = value


def _pptx_set_font(paragraph: Any, run: Any, name: Any) -> None:
    run.font.name = name


class PptxParagraph(OfficeParagraph):
    readers = {
        "fillColor": _pptx_color,
        "strokeColor": _unavailable("strokeColor", "PowerPoint"),
        "font": _pptx_font_attr("name"),
        "pointSize": _pptx_point_size,
        "leading": lambda paragraph, run: paragraph.line_spacing,
        "tracking": _pptx_tracking,
        "horizontalScale": _unavailable("horizontalScale", "PowerPoint"),
        "verticalScale": _unavailable("verticalScale", "PowerPoint"),
        "baselineShift": _unavailable("baselineShift", "PowerPoint"),
        "skew": _unavailable("skew", "PowerPoint"),
        "underline": _pptx_font_attr("underline"),
        "strikethrough": _pptx_strike,
        "allCaps": _pptx_caps("all"),
        "smallCaps": _pptx_caps("small"),
        "superscript": _pptx_script(1),
        "subscript": _pptx_script(-1),
        "paragraphStyleName": _unavailable("paragraphStyleName", "PowerPoint"),
        "characterStyleName": _unavailable("characterStyleName", "PowerPoint"),
    }
    writers = {
        "fillColor": _pptx_set_color,
        "strokeColor": _unavailable("strokeColor", "PowerPoint"),
        "font": _pptx_set_font,
        "pointSize": _pptx_set_point_size,
        "leading": _pptx_set_leading,
        "tracking": _pptx_set_tracking,
        "horizontalScale": _unavailable("horizontalScale", "PowerPoint"),
        "verticalScale": _unavailable("verticalScale", "PowerPoint"),
        "baselineShift": _unavailable("baselineShift", "PowerPoint"),
        "skew": _unavailable("skew", "PowerPoint"),
        "underline": _set_font_flag("underline"),
        "strikethrough": _pptx_set_strike,
        "allCaps": _pptx_set_caps("all"),
        "smallCaps": _pptx_set_caps("small"),
        "superscript": _pptx_set_script(1),
        "subscript": _pptx_set_script(-1),
        "paragraphStyleName": _unavailable("paragraphStyleName", "PowerPoint"),
        "characterStyleName": _unavailable("characterStyleName", "PowerPoint"),
    }
    properties = {
        "paragraphDirection": _pptx_set_rtl,
        "justification": _pptx_set_alignment,
    }


class PptxSpan(OfficeSpan):
    paragraph_view = PptxParagraph

    @staticmethod
    def _element_of(paragraph: Any) -> Any:
        return paragraph._p

    def _clear_text(
        self, paragraph: Any, runs: Sequence[Any], *, keep_objects: bool = True
    ) -> None:
        from pptx.oxml.ns import qn

        p = paragraph._p
        for child in list(p):
            if child.tag in (qn("a:r"), qn("a:br")):
                p.remove(child)

    def _append_run(self, paragraph: Any, text: str, template: Any) -> None:
        run = paragraph.add_run()
        run.text = text
        _replace_rPr(run._r, template)


class PptxResources(ResourceTable):
    def font(self, name: str) -> str:
        if not name or not name.strip():
            raise ResourceNotFound("Empty font name.")
        return name

    def color(self, name: str) -> Swatch:
        from pptx.dml.color import RGBColor
        from pptx.enum.dml import MSO_THEME_COLOR

        try:
            return Swatch(name.upper(), RGBColor.from_string(name.upper()))
        except ValueError:
            pass
        try:
            return Swatch(name, MSO_THEME_COLOR[name])
        except KeyError:
            raise ResourceNotFound(f"No color named '{name}'.") from None

    def colors(self) -> List[Swatch]:
        return []

    def paragraph_style(self, name: str) -> Any:
        raise ResourceNotFound("PowerPoint has no named paragraph styles.")

    def character_style(self, name: str) -> Any:
        raise ResourceNotFound("PowerPoint has no named character styles.")


class PptxDocumentHandler(BaseDocumentHandler):
    """Exposes shape text frames, table cells and notes of a presentation."""

    def __init__(self, source_path: pathlib.Path):
        super().__init__(source_path)
        pptx = _import_pptx()
        self.presentation = pptx.Presentation(str(source_path))
        self._resources = PptxResources()

    @property
    def resources(self) -> PptxResources:
        return self._resources

    def text_containers(self) -> List[OfficeSpan]:
        spans: List[OfficeSpan] = []
        for slide_idx, slide in enumerate(self.presentation.slides):
            for shape_idx, shape in enumerate(slide.shapes):
                location = f"Slide {slide_idx + 1}, shape {shape_idx + 1}"
                if getattr(shape, "has_text_frame", False):
                    spans.append(PptxSpan(shape.text_frame, location, owner=shape))
                if getattr(shape, "has_table", False):
                    spans.extend(self._table_spans(shape.table, location))
            if getattr(slide, "has_notes_slide", False):
                text_frame = slide.notes_slide.notes_text_frame
                if text_frame is not None:
                    spans.append(
                        PptxSpan(
                            text_frame,
                            f"Slide {slide_idx + 1} notes",
                            owner=slide.notes_slide,
                        )
                    )
        return spans

    def _table_spans(self, table: Any, base_location: str) -> List[OfficeSpan]:
        spans: List[OfficeSpan] = []
        for r_idx, row in enumerate(table.rows):
            for c_idx, cell in enumerate(row.cells):
                if cell.text_frame is None:
                    continue
                location = f"{base_location}, row {r_idx + 1}, column {c_idx + 1}"
                spans.append(PptxSpan(cell.text_frame, location, owner=table))
        return spans

    def _write(self, destination: pathlib.Path) -> None:
        self.presentation.save(str(destination))


def detect_handler(path: pathlib.Path) -> Tuple[str, BaseDocumentHandler]:
    """Select an appropriate handler for the provided file."""

    suffix = path.suffix.lower()
    if suffix == ".docx":
        handler: BaseDocumentHandler = DocxDocumentHandler(path)
        return "docx", handler
    if suffix == ".pptx":
        handler = PptxDocumentHandler(path)
        return "pptx", handler
    raise UnsupportedFileTypeError(
        "This file type isn't supported. Please use .docx or .pptx."
    )
