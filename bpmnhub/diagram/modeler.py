from xml.dom import minidom
from xml.parsers.expat import ExpatError

from bpmnhub.diagram.exceptions import DiagramParseError, StructuralInvalidError
from bpmnhub.diagram.validator import validate
from bpmnhub.logging.logger import Log

# Blank canvas opened for a new diagram: one process with a single start event.
DEFAULT_BPMN_XML = """<?xml version="1.0" encoding="UTF-8"?>
<bpmn:definitions xmlns:bpmn="http://www.omg.org/spec/BPMN/20100524/MODEL" xmlns:bpmndi="http://www.omg.org/spec/BPMN/20100524/DI" xmlns:dc="http://www.omg.org/spec/DD/20100524/DC" xmlns:di="http://www.omg.org/spec/DD/20100524/DI" id="Definitions_1" targetNamespace="http://bpmn.io/schema/bpmn">
  <bpmn:process id="Process_1" isExecutable="true">
    <bpmn:startEvent id="StartEvent_1" />
  </bpmn:process>
  <bpmndi:BPMNDiagram id="BPMNDiagram_1">
    <bpmndi:BPMNPlane id="BPMNPlane_1" bpmnElement="Process_1">
      <bpmndi:BPMNShape id="_BPMNShape_StartEvent_2" bpmnElement="StartEvent_1">
        <dc:Bounds x="173" y="102" width="36" height="36" />
      </bpmndi:BPMNShape>
    </bpmndi:BPMNPlane>
  </bpmndi:BPMNDiagram>
</bpmn:definitions>
"""


class ModelerHandle:
    """The diagram currently open in one editor session.

    Callers own the handle and pass it to the operations that need the
    diagram; nothing is kept at module level.
    """

    def __init__(self, xml: str = DEFAULT_BPMN_XML) -> None:
        self._xml = xml
        self._dirty = False

    @property
    def xml(self) -> str:
        return self._xml

    @property
    def dirty(self) -> bool:
        """True when the diagram changed since it was opened or last saved."""
        return self._dirty

    def import_xml(self, xml: str) -> None:
        """Replace the diagram with an imported document.

        Raises:
            StructuralInvalidError: if required elements are missing; the
                current diagram is left untouched.
        """
        result = validate(xml)
        if not result.ok:
            Log.warning(
                "Rejected diagram import",
                missing=",".join(sorted(result.missing_elements)),
            )
            raise StructuralInvalidError(result.missing_elements)
        self._xml = xml
        self._dirty = True
        Log.info("Diagram imported", size=len(xml))

    def update_xml(self, xml: str) -> None:
        """Record an in-progress edit from the editor surface. Not validated."""
        self._xml = xml
        self._dirty = True

    def export_xml(self, pretty: bool = False) -> str:
        """Return the diagram text, optionally re-indented.

        Raises:
            DiagramParseError: if ``pretty`` is set and the text is not well-formed XML.
        """
        if not pretty:
            return self._xml
        try:
            document = minidom.parseString(self._xml.encode("utf-8"))
        except ExpatError as exc:
            raise DiagramParseError(f"Diagram is not well-formed XML: {exc}") from exc
        _strip_blank_text(document.documentElement)
        return document.toprettyxml(indent="  ", encoding="UTF-8").decode("utf-8")

    def reset(self) -> None:
        """Open a blank diagram."""
        self._xml = DEFAULT_BPMN_XML
        self._dirty = False

    def mark_saved(self) -> None:
        self._dirty = False


def _strip_blank_text(node: minidom.Node) -> None:
    for child in list(node.childNodes):
        if child.nodeType == child.TEXT_NODE and not child.data.strip():
            node.removeChild(child)
        elif child.nodeType == child.ELEMENT_NODE:
            _strip_blank_text(child)
