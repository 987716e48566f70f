"""
Shared — 正規化 (Default/Projection Normalizer)

リソース種別ごとに宣言的なテンプレート (ResourceTemplate) を一つ持ち、
normalize() がそれを解釈して入力をスキーマ準拠の形に揃える。

  - トップレベルの @type を固定値で付与
  - スカラー項目のデフォルト補完 (Fallback / Missing)
  - 必須配列を [] で補完
  - 参照配列の各要素に @type / @referredType / id / href を付与

normalize() は純粋関数で、冪等 (normalize(normalize(x)) == normalize(x))。
テンプレートに無い項目はそのまま残す。
"""

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .identity import DEFAULT_REF_ID, locator

TYPE = "@type"
REFERRED_TYPE = "@referredType"


def is_falsy(value: Any) -> bool:
    """JSON 値としての偽 (None, "", 0, False)"""
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (int, float)):
        return value == 0
    return False


def _resolve(value: Any) -> Any:
    if callable(value):
        return value()
    return copy.deepcopy(value)


@dataclass(frozen=True)
class Fallback:
    """値が偽 (未指定・None・""・0・False) ならデフォルトで置き換える。"""

    value: Any

    def applies(self, current: Any) -> bool:
        return is_falsy(current)


@dataclass(frozen=True)
class Missing:
    """値が未指定 (または None) のときだけデフォルトで置き換える。"""

    value: Any

    def applies(self, current: Any) -> bool:
        return current is None


Rule = Fallback | Missing


def _apply_rules(target: dict, rules: Mapping[str, Rule]) -> None:
    for name, rule in rules.items():
        if rule.applies(target.get(name)):
            target[name] = _resolve(rule.value)


@dataclass(frozen=True)
class RefSpec:
    """
    埋め込みオブジェクト (主に参照) の付与ルール。

    path があれば id (デフォルト "1") と href を合成する。
    nested は要素内の配列/オブジェクトに再帰的に適用される。
    """

    type_name: str
    referred_type: str | None = None
    path: str | None = None
    defaults: Mapping[str, Rule] = field(default_factory=dict)
    nested: Mapping[str, "RefSpec"] = field(default_factory=dict)
    override_type: bool = True
    synthesize_id: bool = True
    many: bool = True

    def tag(self, element: Any) -> Any:
        if not isinstance(element, dict):
            return element
        out = dict(element)
        if self.override_type or is_falsy(out.get(TYPE)):
            out[TYPE] = self.type_name
        if self.referred_type:
            out[REFERRED_TYPE] = self.referred_type
        _apply_rules(out, self.defaults)
        if self.path:
            if self.synthesize_id and is_falsy(out.get("id")):
                out["id"] = DEFAULT_REF_ID
            if is_falsy(out.get("href")) and not is_falsy(out.get("id")):
                out["href"] = locator(self.path, out["id"])
        for name, spec in self.nested.items():
            _apply_ref(out, name, spec, required=spec.many)
        return out


def _apply_ref(target: dict, name: str, spec: RefSpec, required: bool) -> None:
    value = target.get(name)
    if isinstance(value, list):
        target[name] = [spec.tag(item) for item in value]
    elif isinstance(value, dict):
        target[name] = spec.tag(value)
    elif required:
        target[name] = []


@dataclass(frozen=True)
class ResourceTemplate:
    """リソース種別ごとのテンプレート。type_name は種別の固定値。"""

    type_name: str
    path: str
    scalars: Mapping[str, Rule] = field(default_factory=dict)
    arrays: tuple[str, ...] = ()
    refs: Mapping[str, RefSpec] = field(default_factory=dict)
    drop_if_empty: tuple[str, ...] = ()
    id_prefix: str | None = None

    @property
    def kind(self) -> str:
        return self.type_name

    def locator(self, resource_id: str) -> str:
        return locator(self.path, resource_id)


def _has_content(value: Any) -> bool:
    if not isinstance(value, dict):
        return False
    return any(key != TYPE and not is_falsy(v) for key, v in value.items())


def normalize(raw: Mapping[str, Any], template: ResourceTemplate) -> dict:
    """入力をテンプレートに従って正規化した新しい dict を返す。"""
    result: dict[str, Any] = {TYPE: template.type_name}
    for key, value in copy.deepcopy(dict(raw)).items():
        if key != TYPE:
            result[key] = value

    _apply_rules(result, template.scalars)

    for name in template.arrays:
        if not isinstance(result.get(name), list):
            result[name] = []

    for name in template.drop_if_empty:
        if name in result and not _has_content(result[name]):
            del result[name]

    for name, spec in template.refs.items():
        _apply_ref(result, name, spec, required=False)

    return result


# 更新時に既存レコードから必ず復元する項目
IMMUTABLE_FIELDS = ("id", "href", "creationDate")


def normalize_update(
    existing: Mapping[str, Any],
    incoming: Mapping[str, Any],
    template: ResourceTemplate,
) -> dict:
    """既存レコードに部分更新をマージして再正規化する。id/href/creationDate は変えない。"""
    merged = {**existing, **incoming}
    for name in IMMUTABLE_FIELDS:
        if name in existing:
            merged[name] = existing[name]
        else:
            merged.pop(name, None)
    return normalize(merged, template)
