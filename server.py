"""Read-only WebDAV adapter over a storage view, built on http.server.

The adapter only translates requests: every lookup goes through
StorageView.open_child and every listing through an EnumerationCursor.
"""

import html
import logging
import shutil
import xml.etree.ElementTree as ET
from http.server import HTTPServer, BaseHTTPRequestHandler
from urllib.parse import unquote, quote

from archive import ArchiveError, InvalidArgumentError, NotFoundError, StatInfo
from storage import EntryStream, StorageView

logger = logging.getLogger(__name__)

DAV_NS = "DAV:"
SUPPORTED_PROPS = [
    "displayname",
    "getcontentlength",
    "getcontenttype",
    "resourcetype",
    "getlastmodified",
]
ALLOWED_METHODS = "OPTIONS, GET, HEAD, PROPFIND"
REJECTED_METHODS = ("PUT", "DELETE", "MKCOL", "PROPPATCH", "MOVE", "COPY",
                    "LOCK", "UNLOCK", "POST", "PATCH")
EPOCH = "Thu, 01 Jan 1970 00:00:00 GMT"
# Cursor items fetched per next() call
BATCH_SIZE = 64


def _dav(tag: str) -> str:
    return f"{{{DAV_NS}}}{tag}"


def split_url_path(raw: str) -> list[str]:
    """Decoded, non-empty segments of a URL path."""
    path = raw.split("?", 1)[0].split("#", 1)[0]
    return [segment for segment in unquote(path).split("/") if segment]


def href_for(segments: list[str], is_container: bool) -> str:
    href = "/" + "/".join(quote(s, safe="") for s in segments)
    return href + "/" if is_container and href != "/" else href


def resolve(root: StorageView, path: list[str]) -> StorageView | EntryStream:
    """Walk path segments from root with open_child."""
    node = root
    for segment in path:
        if not isinstance(node, StorageView):
            raise NotFoundError(f"Not a directory: {'/'.join(path)}")
        node = node.open_child(segment)
    return node


def drain(view: StorageView) -> list[StatInfo]:
    """Read every child stat record of view through a fresh cursor."""
    cursor = view.enumerate()
    items = []
    while True:
        batch, full = cursor.next(BATCH_SIZE)
        items.extend(batch)
        if not full:
            return items


def _property_text(name: str, href: str, info: StatInfo) -> str | None:
    """Text of a scalar DAV property, or None when it does not apply."""
    if name == "displayname":
        segment = href.rstrip("/").rsplit("/", 1)[-1]
        return unquote(segment) if segment else info.display_name or "/"
    if name == "getlastmodified":
        return EPOCH
    if info.is_container:
        return None
    if name == "getcontentlength":
        return str(info.size)
    if name == "getcontenttype":
        return info.content_type
    return None


def response_element(href: str, info: StatInfo, props: list[str] | None = None) -> ET.Element:
    """One DAV:response for a resource; props limits the reported properties."""
    response = ET.Element(_dav("response"))
    ET.SubElement(response, _dav("href")).text = href
    propstat = ET.SubElement(response, _dav("propstat"))
    prop = ET.SubElement(propstat, _dav("prop"))

    for name in props if props is not None else SUPPORTED_PROPS:
        if name == "resourcetype":
            resourcetype = ET.SubElement(prop, _dav("resourcetype"))
            if info.is_container:
                ET.SubElement(resourcetype, _dav("collection"))
            continue
        text = _property_text(name, href, info)
        if text is not None:
            ET.SubElement(prop, _dav(name)).text = text

    ET.SubElement(propstat, _dav("status")).text = "HTTP/1.1 200 OK"
    return response


def multistatus(responses: list[ET.Element]) -> bytes:
    ET.register_namespace("D", DAV_NS)
    root = ET.Element(_dav("multistatus"))
    root.extend(responses)
    return ET.tostring(root, encoding="utf-8", xml_declaration=True)


def requested_props(body: bytes) -> list[str] | None:
    """Property names asked for by a PROPFIND body. None means all of them.

    Raises xml.etree.ElementTree.ParseError on malformed XML.
    """
    if not body.strip():
        return None
    root = ET.fromstring(body)
    prop = root.find(_dav("prop"))
    if prop is None or root.find(_dav("allprop")) is not None:
        return None
    return [child.tag.removeprefix(_dav("")) for child in prop]


def index_page(path: list[str], children: list[StatInfo]) -> bytes:
    """HTML listing of a directory, directories first."""
    title = html.escape("/" + "/".join(path))
    lines = [f"<html><head><title>{title}</title></head><body>", f"<h1>{title}</h1><ul>"]
    if path:
        lines.append('<li><a href="../">..</a></li>')
    for child in children:
        href = quote(child.display_name, safe="") + ("/" if child.is_container else "")
        lines.append(f'<li><a href="{href}">{html.escape(child.display_name)}</a></li>')
    lines.append("</ul></body></html>")
    return "\n".join(lines).encode("utf-8")


class WebDAVHandler(BaseHTTPRequestHandler):
    """Read-only WebDAV requests against the class-level root view."""

    root: StorageView

    def log_message(self, format, *args):
        logger.debug("%s - %s", self.address_string(), format % args)

    def _reply(self, status: int, body: bytes = b"", content_type: str = "text/plain",
               include_body: bool = True, headers: dict[str, str] | None = None):
        self.send_response(status)
        for name, value in (headers or {}).items():
            self.send_header(name, value)
        if body:
            self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        if include_body and body:
            self.wfile.write(body)

    def _resolve(self, include_body: bool = True) -> tuple[list[str], StorageView | EntryStream | None]:
        """Resolve the request path, answering 4xx/5xx itself on failure."""
        path = split_url_path(self.path)
        try:
            return path, resolve(self.root, path)
        except NotFoundError:
            self._reply(404, b"Not Found", include_body=include_body)
        except InvalidArgumentError as e:
            self._reply(400, str(e).encode(), include_body=include_body)
        except ArchiveError as e:
            logger.error("Request for %s failed: %s", self.path, e)
            self._reply(500, str(e).encode(), include_body=include_body)
        return path, None

    def do_OPTIONS(self):
        self._reply(200, headers={"Allow": ALLOWED_METHODS, "DAV": "1"})

    def do_GET(self):
        self._serve(include_body=True)

    def do_HEAD(self):
        self._serve(include_body=False)

    def _serve(self, include_body: bool):
        path, node = self._resolve(include_body)
        if node is None:
            return
        if isinstance(node, StorageView):
            body = index_page(path, drain(node))
            self._reply(200, body, "text/html; charset=utf-8", include_body)
            return

        with node:
            info = node.stat()
            self.send_response(200)
            self.send_header("Content-Type", info.content_type)
            self.send_header("Content-Length", str(info.size))
            self.end_headers()
            if include_body:
                shutil.copyfileobj(node, self.wfile)

    def do_PROPFIND(self):
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length) if length > 0 else b""
        try:
            props = requested_props(body)
        except ET.ParseError:
            self._reply(400, b"Malformed PROPFIND body")
            return

        path, node = self._resolve()
        if node is None:
            return

        if isinstance(node, EntryStream):
            with node:
                responses = [response_element(href_for(path, False), node.stat(), props)]
        else:
            responses = [response_element(href_for(path, True), node.stat(), props)]
            depth = self.headers.get("Depth", "1")
            if depth != "0":
                self._describe_children(node, path, props, depth == "infinity", responses)

        self._reply(207, multistatus(responses), "application/xml; charset=utf-8")

    def _describe_children(self, view: StorageView, path: list[str], props: list[str] | None,
                           recurse: bool, responses: list[ET.Element]):
        for child in drain(view):
            child_path = path + [child.display_name]
            responses.append(response_element(href_for(child_path, child.is_container), child, props))
            if recurse and child.is_container:
                sub = view.open_storage(child.display_name)
                self._describe_children(sub, child_path, props, recurse, responses)

    def _method_not_allowed(self):
        self._reply(405, headers={"Allow": ALLOWED_METHODS})


for _method in REJECTED_METHODS:
    setattr(WebDAVHandler, f"do_{_method}", WebDAVHandler._method_not_allowed)


def make_server(root: StorageView, host: str = "localhost", port: int = 8080) -> HTTPServer:
    """Create a WebDAV server for the given root view."""
    handler_class = type("Handler", (WebDAVHandler,), {"root": root})
    return HTTPServer((host, port), handler_class)
