"""
Area-to-postal-code mapping for Insta-Relief.

The lookup table is keyed by postal code and valued by county (parish)
name. Free-text area descriptions are matched against the county names.
"""

import json
from pathlib import Path
from typing import Dict, Mapping, Optional, Set, Union
from relief.observability.logging_setup import get_logger

log = get_logger("relief.zipmap")

DEFAULT_TABLE_PATH = Path(__file__).resolve().parent.parent / "data" / "zip_to_county.json"

class ZipLookup:
    """우편번호 ↔ 카운티 정적 조회 테이블"""

    def __init__(self, zip_to_county: Mapping[str, str]):
        """
        초기화합니다.

        Args:
            zip_to_county: {우편번호: 카운티명} 매핑
        """
        self.table: Dict[str, str] = {str(z): str(c) for z, c in zip_to_county.items()}

    @classmethod
    def load(cls, path: Optional[Union[str, Path]] = None) -> "ZipLookup":
        """JSON 파일에서 테이블을 읽어옵니다. path가 없으면 내장 테이블을 사용합니다."""
        table_path = Path(path) if path else DEFAULT_TABLE_PATH
        with open(table_path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"zip table must be a JSON object: {table_path}")
        log.info(f"우편번호 테이블 로드됨 path:{table_path} entries:{len(data)}")
        return cls(data)

    def map_area_to_zips(self, area_desc: Optional[str]) -> Set[str]:
        """
        영역 설명에 카운티명이 포함된 모든 우편번호를 반환합니다.

        Args:
            area_desc: 경보의 자유 텍스트 영역 설명 (None/빈 문자열 허용)

        Returns:
            우편번호 집합 (순서 보장 없음)
        """
        if not area_desc:
            return set()
        area = area_desc.lower()
        return {z for z, county in self.table.items() if county and county.lower() in area}

    def county_for(self, zip_code: str) -> Optional[str]:
        return self.table.get(zip_code)

    def zips(self) -> Set[str]:
        return set(self.table)
