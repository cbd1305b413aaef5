"""Call and type signatures displayed beside each documented symbol."""

from __future__ import annotations

from typing import Iterable, List, Optional

from .links import LinkRegistry, get_attribs, htmlsafe
from .models import Doclet, DocletParam


class SignatureBuilder:
    """Formats params, return types and attribute badges into ``doclet.signature``.

    Every identifier is HTML-escaped before it is placed in markup; links
    produced by the registry are inserted as-is.
    """

    def __init__(self, links: LinkRegistry) -> None:
        self.links = links

    @staticmethod
    def needs_signature(doclet: Doclet) -> bool:
        if doclet.kind in ("function", "class"):
            return True
        # typedefs that describe a function get a signature too
        if doclet.kind == "typedef" and doclet.type and doclet.type.names:
            return any(name.lower() == "function" for name in doclet.type.names)
        return False

    # params --------------------------------------------------------------

    @staticmethod
    def signature_attributes(item: DocletParam) -> List[str]:
        attributes: List[str] = []
        if item.optional:
            attributes.append("opt")
        if item.nullable is True:
            attributes.append("nullable")
        elif item.nullable is False:
            attributes.append("non-null")
        return attributes

    def item_name(self, item: DocletParam) -> str:
        attributes = self.signature_attributes(item)
        name = htmlsafe(item.name or "")
        if item.variable:
            name = "&hellip;" + name
        if attributes:
            name = f'{name}<span class="signature-attributes">{", ".join(attributes)}</span>'
        return name

    def param_names(self, params: Iterable[DocletParam]) -> List[str]:
        # dotted names such as ``options.foo`` describe properties of another param
        return [self.item_name(param) for param in params if param.name and "." not in param.name]

    def add_signature_params(self, doclet: Doclet) -> None:
        params = self.param_names(doclet.params) if doclet.params else []
        doclet.signature = f"{doclet.signature or ''}({', '.join(params)})"

    # return and member types ----------------------------------------------

    def item_type_strings(self, item: Optional[object]) -> List[str]:
        type_spec = getattr(item, "type", None)
        if not type_spec or not type_spec.names:
            return []
        return [self.links.linkto(name, htmlsafe(name)) for name in type_spec.names]

    @staticmethod
    def attribs_string(attribs: List[str]) -> str:
        return htmlsafe(", ".join(attribs)) if attribs else ""

    def add_signature_returns(self, doclet: Doclet) -> None:
        # Attributes from every @returns entry are merged; mixing nullable and
        # non-null return types is rare enough to accept the odd result.
        attribs: List[str] = []
        return_types: List[str] = []
        for item in doclet.returns:
            for attrib in get_attribs(item):
                if attrib not in attribs:
                    attribs.append(attrib)
            return_types.extend(self.item_type_strings(item))

        return_types_string = ""
        if return_types:
            return_types_string = f" &rarr; {self.attribs_string(attribs)}{{{'|'.join(return_types)}}}"

        doclet.signature = (
            f'<span class="signature">{doclet.signature or ""}</span>'
            f'<span class="return-type-signature">{return_types_string}</span>'
        )

    def add_signature_types(self, doclet: Doclet) -> None:
        types = self.item_type_strings(doclet) if doclet.type else []
        doclet.signature = f'{doclet.signature or ""}<span class="type-signature">{"|".join(types)}</span>'

    @staticmethod
    def add_attribs(doclet: Doclet) -> None:
        attribs = get_attribs(doclet)
        if attribs:
            doclet.attribs = "".join(
                f'<span class="method-type-signature is-{attrib}">{attrib}</span>' for attrib in attribs
            )

    # entry points --------------------------------------------------------

    def format_callable(self, doclet: Doclet) -> bool:
        """Attach a call signature when the doclet needs one; returns whether it did."""
        if not self.needs_signature(doclet):
            return False
        self.add_signature_params(doclet)
        self.add_signature_returns(doclet)
        self.add_attribs(doclet)
        return True

    def format_member(self, doclet: Doclet) -> bool:
        """Attach a type-only signature to members and constants.

        Constants are reclassified as members once formatted.
        """
        if doclet.kind not in ("member", "constant"):
            return False
        self.add_signature_types(doclet)
        self.add_attribs(doclet)
        if doclet.kind == "constant":
            doclet.kind = "member"
        return True


__all__ = ["SignatureBuilder"]
