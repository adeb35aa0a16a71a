"""
appengine_web
-------------

standard 환경의 appengine-web.xml 에서 <application>, <version> 값을 읽는 모듈.
요소가 없으면 None 을 돌려줄 뿐 에러로 보지 않는다.
파일 없음/XML 파싱 실패는 그대로 전파한다.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Optional


APPENGINE_WEB_NS = "http://appengine.google.com/ns/1.0"


@dataclass(frozen=True)
class AppEngineWebDescriptor:
    application_id: Optional[str] = None
    version: Optional[str] = None


def _child_text(root: ET.Element, tag: str) -> Optional[str]:
    # 네임스페이스 선언이 있는 파일과 없는 파일 모두 허용
    node = root.find(f"{{{APPENGINE_WEB_NS}}}{tag}")
    if node is None:
        node = root.find(tag)
    if node is None or node.text is None:
        return None
    text = node.text.strip()
    return text or None


def read_descriptor(path: str) -> AppEngineWebDescriptor:
    root = ET.parse(path).getroot()
    return AppEngineWebDescriptor(
        application_id=_child_text(root, "application"),
        version=_child_text(root, "version"),
    )
