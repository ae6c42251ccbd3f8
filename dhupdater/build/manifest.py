"""
更新清单构建器

把版本号、整包摘要、下载地址和逐文件摘要组装为更新清单，
并输出两种逻辑等价的格式：

JSON::

    {"version": ..., "sha512": ..., "package_type": "zip",
     "urls": [...], "file_md5": {"<path>": "<md5>", ...}}

XML::

    <update>
      <version>...</version>
      <sha512>...</sha512>
      <package_type>zip</package_type>
      <urls><url>...</url></urls>
      <file_md5><file path="..." md5="..." /></file_md5>
    </update>
"""

import json
import os
import tempfile
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .build_context import BuildError


PACKAGE_TYPE = "zip"
MANIFEST_SUFFIX = ".dh.updater"

_XML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&apos;"),
    # 属性值解析时会把空白字符规范化为空格，必须用字符引用保留
    ("\t", "&#9;"),
    ("\n", "&#10;"),
    ("\r", "&#13;"),
)


class ManifestWriteError(BuildError):
    """清单文件写入失败"""
    pass


class ManifestFormatError(ValueError):
    """清单文本无法解析"""
    pass


@dataclass(frozen=True)
class PackageManifest:
    """更新清单"""
    version: str
    sha512: str
    urls: Tuple[str, ...] = ()
    file_md5: Mapping[str, str] = field(default_factory=dict)
    package_type: str = PACKAGE_TYPE

    def to_dict(self) -> Dict[str, Any]:
        """按清单字段顺序转换为字典"""
        return {
            'version': self.version,
            'sha512': self.sha512,
            'package_type': self.package_type,
            'urls': list(self.urls),
            'file_md5': dict(self.file_md5),
        }


def parse_urls(raw: Optional[str]) -> List[str]:
    """拆分逗号分隔的下载地址参数，丢弃空白项"""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


def release_url(server_url: str, repository_id: Optional[str], version: str, archive_name: str) -> Optional[str]:
    """推导发布附件下载地址

    Returns:
        Optional[str]: `<server>/<repo>/releases/download/v<version>/<archive>`；
        未提供仓库标识时返回 None
    """
    if not repository_id or not repository_id.strip():
        return None
    return f"{server_url.rstrip('/')}/{repository_id.strip()}/releases/download/v{version}/{archive_name}"


class ManifestBuilder:
    """清单构建器"""

    def __init__(self, package_type: str = PACKAGE_TYPE):
        self.package_type = package_type

    def build(
        self,
        version: str,
        archive_digest: str,
        file_digests: Mapping[str, str],
        explicit_urls: Iterable[str] = (),
        release_url: Optional[str] = None,
    ) -> PackageManifest:
        """构建清单

        Args:
            version: 四段式版本号
            archive_digest: 整包 SHA-512 (base64)
            file_digests: 相对路径 -> MD5
            explicit_urls: 调用方显式提供的下载地址，按给定顺序追加
            release_url: 推导出的主发布地址，存在时排在第一位

        Returns:
            PackageManifest: 不可变清单
        """
        urls: List[str] = []
        if release_url and release_url.strip():
            urls.append(release_url.strip())
        urls.extend(url.strip() for url in explicit_urls if url and url.strip())

        return PackageManifest(
            version=version,
            sha512=archive_digest,
            urls=tuple(urls),
            file_md5=dict(file_digests),
            package_type=self.package_type,
        )


def xml_escape(text: str) -> str:
    """转义 XML 文本和属性中的 & < > " ' 以及制表符和换行符"""
    for char, entity in _XML_ESCAPES:
        text = text.replace(char, entity)
    return text


def to_json(manifest: PackageManifest) -> str:
    return json.dumps(manifest.to_dict(), ensure_ascii=False, indent=2)


def to_xml(manifest: PackageManifest) -> str:
    lines = ["<update>"]
    lines.append(f"  <version>{xml_escape(manifest.version)}</version>")
    lines.append(f"  <sha512>{xml_escape(manifest.sha512)}</sha512>")
    lines.append(f"  <package_type>{xml_escape(manifest.package_type)}</package_type>")
    lines.append("  <urls>")
    for url in manifest.urls:
        lines.append(f"    <url>{xml_escape(url)}</url>")
    lines.append("  </urls>")
    lines.append("  <file_md5>")
    for path, md5 in manifest.file_md5.items():
        lines.append(f'    <file path="{xml_escape(path)}" md5="{xml_escape(md5)}" />')
    lines.append("  </file_md5>")
    lines.append("</update>")
    return "\n".join(lines) + "\n"


def from_json(text: str) -> PackageManifest:
    """解析 JSON 清单

    Raises:
        ManifestFormatError: 格式错误或缺少字段
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ManifestFormatError(f"JSON 清单解析失败: {e}") from e

    if not isinstance(data, dict):
        raise ManifestFormatError("JSON 清单根节点必须是对象")

    try:
        return PackageManifest(
            version=str(data['version']),
            sha512=str(data['sha512']),
            package_type=str(data.get('package_type', PACKAGE_TYPE)),
            urls=tuple(str(u) for u in data.get('urls', [])),
            file_md5={str(k): str(v) for k, v in data.get('file_md5', {}).items()},
        )
    except (KeyError, AttributeError, TypeError) as e:
        raise ManifestFormatError(f"JSON 清单字段缺失或类型错误: {e}") from e


def from_xml(text: str) -> PackageManifest:
    """解析 XML 清单

    Raises:
        ManifestFormatError: 格式错误或缺少字段
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise ManifestFormatError(f"XML 清单解析失败: {e}") from e

    if root.tag != "update":
        raise ManifestFormatError(f"XML 清单根元素必须是 <update>，实际为 <{root.tag}>")

    def required_text(tag: str) -> str:
        element = root.find(tag)
        if element is None:
            raise ManifestFormatError(f"XML 清单缺少 <{tag}>")
        return element.text or ""

    file_md5: Dict[str, str] = {}
    for element in root.findall("file_md5/file"):
        path = element.get("path")
        md5 = element.get("md5")
        if path is None or md5 is None:
            raise ManifestFormatError("<file> 元素必须包含 path 和 md5 属性")
        file_md5[path] = md5

    return PackageManifest(
        version=required_text("version"),
        sha512=required_text("sha512"),
        package_type=required_text("package_type"),
        urls=tuple(element.text or "" for element in root.findall("urls/url")),
        file_md5=file_md5,
    )


def load_manifest(path: Path) -> PackageManifest:
    """按扩展名读取 .json 或 .xml 清单文件"""
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".xml":
        return from_xml(text)
    return from_json(text)


def manifest_paths(binary_path: Path, output_dir: Path) -> Tuple[Path, Path]:
    """清单文件路径: <output_dir>/<binary>.dh.updater.json|.xml"""
    base_name = Path(binary_path).name
    output_dir = Path(output_dir)
    return (
        output_dir / f"{base_name}{MANIFEST_SUFFIX}.json",
        output_dir / f"{base_name}{MANIFEST_SUFFIX}.xml",
    )


def _write_temp(path: Path, content: str) -> str:
    """把内容写入目标旁的临时文件，返回临时文件路径"""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=path.name + ".", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(content)
    except BaseException:
        os.unlink(tmp_name)
        raise
    return tmp_name


def write_manifest(manifest: PackageManifest, json_path: Path, xml_path: Path) -> None:
    """写出两种格式的清单

    两份文本先全部写入临时文件，都成功后再逐个替换目标文件，
    任一写入失败时不会留下新旧混杂的一对清单。

    Raises:
        ManifestWriteError: 写入失败
    """
    documents: Sequence[Tuple[Path, str]] = (
        (Path(json_path), to_json(manifest)),
        (Path(xml_path), to_xml(manifest)),
    )
    staged: List[Tuple[str, Path]] = []
    current = documents[0][0]
    try:
        for path, content in documents:
            current = path
            staged.append((_write_temp(path, content), path))
        for tmp_name, path in staged:
            current = path
            os.replace(tmp_name, path)
    except (OSError, UnicodeError) as e:
        for tmp_name, _ in staged:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
        raise ManifestWriteError(f"写入清单文件失败 {current}: {e}") from e
