"""Minimal PDF 1.4 writer: object table, page tree, text, shapes and JPEG images."""

from __future__ import annotations

from dataclasses import dataclass, field

# Bezier control offset for approximating a quarter circle
KAPPA = 0.5522847498


@dataclass
class JpegImage:
    data: bytes
    width: int
    height: int


@dataclass
class Page:
    content: bytes
    width: float
    height: float
    images: dict[str, JpegImage] = field(default_factory=dict)


class PDFBuilder:
    def __init__(self) -> None:
        self.objects: list[bytes] = [b""]

    def reserve(self) -> int:
        self.objects.append(b"")
        return len(self.objects) - 1

    def set_obj(self, num: int, data: str | bytes) -> None:
        self.objects[num] = data.encode("latin-1") if isinstance(data, str) else data

    def add_obj(self, data: str | bytes) -> int:
        num = self.reserve()
        self.set_obj(num, data)
        return num

    def add_stream(self, payload: bytes, extra: str = "") -> int:
        head = f"<< {extra}/Length {len(payload)} >>\nstream\n".encode("latin-1")
        return self.add_obj(head + payload + b"\nendstream")

    def build(self, root_obj: int) -> bytes:
        out = bytearray()
        out.extend(b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n")

        offsets = [0] * len(self.objects)
        for i in range(1, len(self.objects)):
            offsets[i] = len(out)
            out.extend(f"{i} 0 obj\n".encode("ascii"))
            out.extend(self.objects[i])
            if not self.objects[i].endswith(b"\n"):
                out.extend(b"\n")
            out.extend(b"endobj\n")

        xref = len(out)
        out.extend(f"xref\n0 {len(self.objects)}\n".encode("ascii"))
        out.extend(b"0000000000 65535 f \n")
        for i in range(1, len(self.objects)):
            out.extend(f"{offsets[i]:010d} 00000 n \n".encode("ascii"))

        out.extend(b"trailer\n")
        out.extend(f"<< /Size {len(self.objects)} /Root {root_obj} 0 R >>\n".encode("ascii"))
        out.extend(b"startxref\n")
        out.extend(f"{xref}\n".encode("ascii"))
        out.extend(b"%%EOF\n")
        return bytes(out)


def build_document(pages: list[Page]) -> bytes:
    """Assemble pages into a complete PDF. An empty list gives a zero-page document."""
    pdf = PDFBuilder()
    catalog_obj = pdf.reserve()
    pages_obj = pdf.reserve()
    font_obj = pdf.add_obj("<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica /Encoding /WinAnsiEncoding >>")

    kids: list[int] = []
    for page in pages:
        xobjects = []
        for name, img in page.images.items():
            img_obj = pdf.add_stream(
                img.data,
                extra=(
                    f"/Type /XObject /Subtype /Image /Width {img.width} /Height {img.height} "
                    "/ColorSpace /DeviceRGB /BitsPerComponent 8 /Filter /DCTDecode "
                ),
            )
            xobjects.append(f"/{name} {img_obj} 0 R")
        contents_obj = pdf.add_stream(page.content)

        resources = f"/Font << /F1 {font_obj} 0 R >>"
        if xobjects:
            resources += f" /XObject << {' '.join(xobjects)} >>"
        page_obj = pdf.add_obj(
            f"<< /Type /Page /Parent {pages_obj} 0 R "
            f"/MediaBox [0 0 {page.width:g} {page.height:g}] "
            f"/Resources << {resources} >> "
            f"/Contents {contents_obj} 0 R >>"
        )
        kids.append(page_obj)

    kid_refs = " ".join(f"{k} 0 R" for k in kids)
    pdf.set_obj(pages_obj, f"<< /Type /Pages /Kids [{kid_refs}] /Count {len(kids)} >>")
    pdf.set_obj(catalog_obj, f"<< /Type /Catalog /Pages {pages_obj} 0 R >>")
    return pdf.build(root_obj=catalog_obj)


class Canvas:
    """Content stream for one page, in PDF (bottom-left origin) coordinates."""

    def __init__(self) -> None:
        self.cmds: list[str] = []

    @staticmethod
    def esc(text: str) -> str:
        return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")

    def add(self, cmd: str) -> None:
        self.cmds.append(cmd)

    def fill_gray(self, level: float) -> None:
        self.add(f"{level:.3f} g")

    def rect_fill(self, x: float, y: float, w: float, h: float) -> None:
        self.add(f"{x:.2f} {y:.2f} {w:.2f} {h:.2f} re f")

    def rounded_rect_fill(self, x: float, y: float, w: float, h: float, r: float) -> None:
        r = max(0.0, min(r, w / 2, h / 2))
        k = r * KAPPA
        self.add(f"{x + r:.2f} {y:.2f} m")
        self.add(f"{x + w - r:.2f} {y:.2f} l")
        self.add(f"{x + w - r + k:.2f} {y:.2f} {x + w:.2f} {y + r - k:.2f} {x + w:.2f} {y + r:.2f} c")
        self.add(f"{x + w:.2f} {y + h - r:.2f} l")
        self.add(f"{x + w:.2f} {y + h - r + k:.2f} {x + w - r + k:.2f} {y + h:.2f} {x + w - r:.2f} {y + h:.2f} c")
        self.add(f"{x + r:.2f} {y + h:.2f} l")
        self.add(f"{x + r - k:.2f} {y + h:.2f} {x:.2f} {y + h - r + k:.2f} {x:.2f} {y + h - r:.2f} c")
        self.add(f"{x:.2f} {y + r:.2f} l")
        self.add(f"{x:.2f} {y + r - k:.2f} {x + r - k:.2f} {y:.2f} {x + r:.2f} {y:.2f} c")
        self.add("f")

    def ellipse_fill(self, x: float, y: float, w: float, h: float) -> None:
        rx, ry = w / 2, h / 2
        cx, cy = x + rx, y + ry
        kx, ky = rx * KAPPA, ry * KAPPA
        self.add(f"{cx + rx:.2f} {cy:.2f} m")
        self.add(f"{cx + rx:.2f} {cy + ky:.2f} {cx + kx:.2f} {cy + ry:.2f} {cx:.2f} {cy + ry:.2f} c")
        self.add(f"{cx - kx:.2f} {cy + ry:.2f} {cx - rx:.2f} {cy + ky:.2f} {cx - rx:.2f} {cy:.2f} c")
        self.add(f"{cx - rx:.2f} {cy - ky:.2f} {cx - kx:.2f} {cy - ry:.2f} {cx:.2f} {cy - ry:.2f} c")
        self.add(f"{cx + kx:.2f} {cy - ry:.2f} {cx + rx:.2f} {cy - ky:.2f} {cx + rx:.2f} {cy:.2f} c")
        self.add("f")

    def clip_rect(self, x: float, y: float, w: float, h: float) -> None:
        self.add(f"{x:.2f} {y:.2f} {w:.2f} {h:.2f} re W n")

    def save_state(self) -> None:
        self.add("q")

    def restore_state(self) -> None:
        self.add("Q")

    def multiline(self, x: float, y: float, lines: list[str], size: float, leading: float) -> None:
        if not lines:
            return
        self.fill_gray(0.0)
        self.add("BT")
        self.add(f"/F1 {size:.2f} Tf")
        self.add(f"{leading:.2f} TL")
        self.add(f"1 0 0 1 {x:.2f} {y:.2f} Tm")
        for idx, line in enumerate(lines):
            if idx > 0:
                self.add("T*")
            self.add(f"({self.esc(line)}) Tj")
        self.add("ET")

    def image(self, name: str, x: float, y: float, w: float, h: float) -> None:
        self.add("q")
        self.add(f"{w:.2f} 0 0 {h:.2f} {x:.2f} {y:.2f} cm")
        self.add(f"/{name} Do")
        self.add("Q")

    def stream(self) -> bytes:
        # WinAnsi 覆盖不到的字符用 ? 代替
        return ("\n".join(self.cmds) + "\n").encode("cp1252", errors="replace")
