from __future__ import annotations

from typing import Iterable, List

from .file_format import PRIMITIVE_KINDS, WRAPPER_KINDS, SignatureToken, TokenKind


def format_signature_token(token: SignatureToken) -> str:
	# Struct indices stay raw here; only global borrows resolve struct names.
	if token.kind in PRIMITIVE_KINDS:
		return token.kind.value
	if token.kind in WRAPPER_KINDS:
		return f"{token.kind.value}({format_signature_token(token.inner)})"
	if token.kind == TokenKind.STRUCT_INSTANTIATION:
		args = ", ".join(format_signature_token(t) for t in token.type_args)
		return f"{token.kind.value}({token.index}, [{args}])"
	return f"{token.kind.value}({token.index})"


def format_signature(tokens: Iterable[SignatureToken]) -> List[str]:
	return [format_signature_token(t) for t in tokens]
