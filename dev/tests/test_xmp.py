"""
pngmeta - XMP Packet Tests

Can be run standalone: python tests.py --module xmp
"""

import xml.etree.ElementTree as ET

import pytest

import png_fixtures  # noqa: F401  (path setup)

from pngmeta.formats.xmp import (
    XMPError, XMPMetadata, build_xmp_packet, extract_xmp_packet, parse_xmp, read_xmp_text,
)
from pngmeta.formats.xmp.xmp import NS_DC, NS_RDF, NS_X, NS_XML

SAMPLE_XMP = """<?xpacket begin='' id='W5M0MpCehiHzreSzNTczkc9d'?>
<x:xmpmeta xmlns:x="adobe:ns:meta/" xmlns:foo="http://www.foo.org/foo-syntax-ns#">
    <rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">
        <rdf:Description
            rdf:about="https://example.com/cat.png" foo:foodie="yes"
            xmlns:dc="http://purl.org/dc/elements/1.1/">
            <dc:title><rdf:Alt><rdf:li xml:lang="x-default">A cat</rdf:li></rdf:Alt></dc:title>
            <dc:description><rdf:Alt><rdf:li xml:lang="x-default">Sitting</rdf:li></rdf:Alt></dc:description>
        </rdf:Description>
    </rdf:RDF>
</x:xmpmeta>
<?xpacket end='w'?>"""


def test_parse_sample_packet():
    metadata = read_xmp_text(SAMPLE_XMP)
    assert metadata.resource_url == "https://example.com/cat.png"
    assert metadata.title == "A cat"
    assert metadata.description == "Sitting"
    assert metadata.extended == {
        "foo": ("http://www.foo.org/foo-syntax-ns#", {"foodie": "yes"}),
    }


def test_extract_ignores_itxt_header():
    text = "XML:com.adobe.xmp\x00\x00\x00\x00\x00" + SAMPLE_XMP
    xml = extract_xmp_packet(text)
    assert xml.startswith("<x:xmpmeta")
    assert xml.endswith("</x:xmpmeta>")


def test_missing_markers_give_none():
    assert extract_xmp_packet("<x:xmpmeta/>") is None
    assert extract_xmp_packet("<?xpacket begin='' id='x'?><x:xmpmeta/>") is None
    assert read_xmp_text("plain comment") is None


def test_build_and_parse_round_trip():
    metadata = XMPMetadata(
        resource_url="https://example.com/a?b=1&c=2",
        title='Fish & "Chips"',
        description="<not markup>",
        extended={"bar": ("http://www.bar.net/xmp/bar", {"barfly": "nope"})},
    )
    packet = build_xmp_packet(metadata)

    assert packet.startswith("<?xpacket begin=")
    assert packet.rstrip().endswith("<?xpacket end='w'?>")
    assert "&amp;" in packet
    assert read_xmp_text(packet) == metadata


def test_description_without_title_is_kept():
    packet = build_xmp_packet(XMPMetadata(description="Only a description"))
    parsed = read_xmp_text(packet)
    assert parsed.title == ""
    assert parsed.description == "Only a description"


def test_all_empty_is_rejected():
    with pytest.raises(XMPError):
        build_xmp_packet(XMPMetadata())
    with pytest.raises(XMPError):
        build_xmp_packet(XMPMetadata(extended={"foo": ("http://foo/", {"a": "b"})}))


def test_reserved_prefix_is_rejected():
    with pytest.raises(XMPError):
        build_xmp_packet(XMPMetadata(title="t", extended={"rdf": ("http://x/", {"a": "b"})}))


def test_malformed_xml_raises():
    with pytest.raises(XMPError):
        parse_xmp("<x:xmpmeta xmlns:x='adobe:ns:meta/'><unclosed></x:xmpmeta>")


def test_packet_without_description():
    metadata = parse_xmp("<x:xmpmeta xmlns:x='adobe:ns:meta/'/>")
    assert metadata.is_empty()


def test_merge():
    base = XMPMetadata(title="Old", extended={"foo": ("http://foo/", {"a": "1"})})
    base.merge(XMPMetadata(description="New",
                           extended={"foo": ("http://foo/", {"b": "2"})}))
    assert base.title == "Old"
    assert base.description == "New"
    assert base.extended == {"foo": ("http://foo/", {"a": "1", "b": "2"})}

    assert base.to_dict()["extended"] == {
        "foo": {"namespace": "http://foo/", "properties": {"a": "1", "b": "2"}},
    }


def test_invalid_xml_names_are_rejected():
    for extended in (
        {"foo": ("http://foo/", {"bad name": "v"})},
        {"foo": ("http://foo/", {"1st": "v"})},
        {"my:foo": ("http://foo/", {"a": "b"})},
    ):
        with pytest.raises(XMPError):
            build_xmp_packet(XMPMetadata(title="t", extended=extended))


def test_unencodable_value_is_rejected():
    with pytest.raises(XMPError):
        build_xmp_packet(XMPMetadata(title="bell \x07"))


def test_reserved_namespace_under_new_prefix_is_rejected():
    for ns_url in (NS_RDF, NS_DC, NS_X, NS_XML):
        with pytest.raises(XMPError):
            build_xmp_packet(XMPMetadata(title="a", extended={"r": (ns_url, {"a": "b"})}))

    later = build_xmp_packet(XMPMetadata(title="b"))
    assert "<rdf:RDF" in later
    assert "<dc:title>" in later


def test_core_prefixes_survive_outside_registration():
    ET.register_namespace("r", NS_RDF)
    packet = build_xmp_packet(XMPMetadata(title="c"))
    assert "<rdf:Description" in packet
    assert "<r:" not in packet
