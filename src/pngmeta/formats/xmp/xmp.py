"""
XMP (Extensible Metadata Platform) packets.

Builds and reads the small RDF/XML packet stored in a PNG iTXt chunk
under the "XML:com.adobe.xmp" keyword. Only the fields this project maps
are handled: the resource URL (rdf:about), dc:title, dc:description and
flat namespaced attributes on rdf:Description ("extended" properties).
"""

import io
import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import Optional

from ..png.itxt import XMP_KEYWORD

logger = logging.getLogger(__name__)


NS_X = "adobe:ns:meta/"
NS_RDF = "http://www.w3.org/1999/02/22-rdf-syntax-ns#"
NS_DC = "http://purl.org/dc/elements/1.1/"
NS_XML = "http://www.w3.org/XML/1998/namespace"

RESERVED_PREFIXES = {"x", "rdf", "dc", "xml", "xmlns"}
RESERVED_NAMESPACES = {NS_X, NS_RDF, NS_DC, NS_XML}
CORE_NAMESPACES = {"x": NS_X, "rdf": NS_RDF, "dc": NS_DC}

# XML name without a colon: letter or underscore, then letters, digits, "_", "-", "."
NCNAME_RE = re.compile(r"[^\W\d][\w.\-]*\Z")

XPACKET_ID = "W5M0MpCehiHzreSzNTczkc9d"
XPACKET_BEGIN = f"<?xpacket begin='\ufeff' id='{XPACKET_ID}'?>"
XPACKET_END = "<?xpacket end='w'?>"


def _register_core_namespaces():
    for prefix, uri in CORE_NAMESPACES.items():
        ET.register_namespace(prefix, uri)


_register_core_namespaces()


class XMPError(ValueError):
    """XMP packet could not be built or parsed."""


# Extended properties: prefix -> (namespace URL, {name: value})
ExtendedProperties = dict[str, tuple[str, dict[str, str]]]


@dataclass
class XMPMetadata:
    """The XMP fields mapped to and from PNG metadata."""
    resource_url: str = ""
    title: str = ""
    description: str = ""
    extended: ExtendedProperties = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (self.resource_url or self.title or self.description)

    def merge(self, other: 'XMPMetadata'):
        """Copy non-empty fields from other into self."""
        for name in ("resource_url", "title", "description"):
            value = getattr(other, name)
            if value:
                setattr(self, name, value)
        for prefix, (ns_url, props) in other.extended.items():
            _, existing = self.extended.setdefault(prefix, (ns_url, {}))
            existing.update(props)

    def to_dict(self) -> dict:
        return {
            "resource_url": self.resource_url,
            "title": self.title,
            "description": self.description,
            "extended": {
                prefix: {"namespace": ns_url, "properties": dict(props)}
                for prefix, (ns_url, props) in self.extended.items()
            },
        }


def _alt_text(parent: ET.Element, tag: str, text: str):
    """<tag><rdf:Alt><rdf:li xml:lang="x-default">text</rdf:li></rdf:Alt></tag>"""
    elem = ET.SubElement(parent, tag)
    alt = ET.SubElement(elem, f"{{{NS_RDF}}}Alt")
    li = ET.SubElement(alt, f"{{{NS_RDF}}}li")
    li.set(f"{{{NS_XML}}}lang", "x-default")
    li.text = text


def build_xmp_packet(metadata: XMPMetadata) -> str:
    """
    Serialize metadata as an xpacket-wrapped XMP string.

    Raises:
        XMPError: resource_url, title and description are all empty, an
            extended prefix or namespace collides with a reserved one, a
            prefix or property name is not a valid XML name, or the result
            does not parse back
    """
    if metadata.is_empty():
        raise XMPError("Can't insert all empty metadata into image")

    for prefix, (ns_url, props) in metadata.extended.items():
        if prefix in RESERVED_PREFIXES:
            raise XMPError(f"Extended namespace prefix {prefix!r} is reserved")
        if ns_url in RESERVED_NAMESPACES:
            raise XMPError(f"Extended namespace {ns_url!r} is reserved")
        for name in (prefix, *props):
            if not NCNAME_RE.match(name):
                raise XMPError(f"Not a valid XML name: {name!r}")

    # register_namespace is process-wide; a previous build may have remapped it
    _register_core_namespaces()

    root = ET.Element(f"{{{NS_X}}}xmpmeta")
    rdf = ET.SubElement(root, f"{{{NS_RDF}}}RDF")
    desc = ET.SubElement(rdf, f"{{{NS_RDF}}}Description")

    if metadata.resource_url:
        desc.set(f"{{{NS_RDF}}}about", metadata.resource_url)

    for prefix, (ns_url, props) in metadata.extended.items():
        try:
            ET.register_namespace(prefix, ns_url)
        except ValueError as e:
            raise XMPError(f"Invalid namespace prefix {prefix!r}: {e}") from e
        for name, value in props.items():
            desc.set(f"{{{ns_url}}}{name}", str(value))

    if metadata.title:
        _alt_text(desc, f"{{{NS_DC}}}title", metadata.title)
    if metadata.description:
        _alt_text(desc, f"{{{NS_DC}}}description", metadata.description)

    ET.indent(root, space="    ")
    xml = ET.tostring(root, encoding="unicode")
    try:
        ET.fromstring(xml)
    except ET.ParseError as e:
        raise XMPError(f"Built XMP is not well formed: {e}") from e
    return f"{XPACKET_BEGIN}\n{xml}\n{XPACKET_END}"


def _find_marker(text: str, start_str: str, qualifier: str, end_str: str,
                 start: int = 0) -> Optional[tuple[int, int]]:
    """Span of the first processing instruction that contains qualifier."""
    begin = text.find(start_str, start)
    while begin >= 0:
        close = text.find(end_str, begin)
        if close < 0:
            return None
        close += len(end_str)
        if qualifier in text[begin:close]:
            return begin, close
        begin = text.find(start_str, close)
    return None


def extract_xmp_packet(text: str) -> Optional[str]:
    """XML between the xpacket begin and end markers, or None."""
    begin = _find_marker(text, "<?xpacket", "begin", "?>")
    if begin is None:
        logger.warning("Didn't find the xpacket begin marker")
        return None
    end = _find_marker(text, "<?xpacket", "end", "?>", begin[1])
    if end is None:
        logger.warning("Didn't find the xpacket end marker")
        return None
    return text[begin[1]:end[0]].strip()


def _child_li_text(desc: ET.Element, tag: str) -> str:
    elem = desc.find(tag)
    if elem is None:
        return ""
    li = elem.find(f".//{{{NS_RDF}}}li")
    if li is None:
        # simple (non-Alt) property
        return (elem.text or "").strip()
    return li.text or ""


def parse_xmp(xml: str) -> XMPMetadata:
    """
    Read resource URL, title, description and extended attributes.

    Raises:
        XMPError: The XML is not well formed
    """
    prefixes: dict[str, str] = {}
    try:
        root = None
        for event, item in ET.iterparse(io.StringIO(xml), events=("start-ns", "start")):
            if event == "start-ns":
                prefix, uri = item
                prefixes.setdefault(uri, prefix)
            elif root is None:
                root = item
    except ET.ParseError as e:
        raise XMPError(f"Failed to parse XMP: {e}") from e

    metadata = XMPMetadata()
    desc = root.find(f".//{{{NS_RDF}}}Description") if root is not None else None
    if desc is None:
        logger.warning("XMP packet has no rdf:Description")
        return metadata

    metadata.resource_url = desc.get(f"{{{NS_RDF}}}about", "")
    metadata.title = _child_li_text(desc, f"{{{NS_DC}}}title")
    metadata.description = _child_li_text(desc, f"{{{NS_DC}}}description")

    for key, value in desc.attrib.items():
        if not key.startswith("{"):
            continue
        ns_url, _, name = key[1:].partition("}")
        if ns_url in (NS_RDF, NS_XML):
            continue
        prefix = prefixes.get(ns_url)
        if not prefix:
            logger.debug(f"Skipping attribute in unprefixed namespace: {key}")
            continue
        _, props = metadata.extended.setdefault(prefix, (ns_url, {}))
        props[name] = value

    return metadata


def read_xmp_text(text: str) -> Optional[XMPMetadata]:
    """Parse XMP out of iTXt text; None when no packet is present."""
    xml = extract_xmp_packet(text)
    if xml is None:
        return None
    return parse_xmp(xml)


__all__ = [
    "XMP_KEYWORD", "XMPError", "XMPMetadata",
    "build_xmp_packet", "extract_xmp_packet", "parse_xmp", "read_xmp_text",
]
