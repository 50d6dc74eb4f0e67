import io
import pdfplumber
from ...domain.errors import RenderError
from ...domain.ports import PageRendererPort

BASE_DPI = 72


class PdfPlumberRenderer(PageRendererPort):
    def __init__(self, scale: float = 1.5) -> None:
        self.resolution = int(BASE_DPI * scale)

    def render_first_page(self, pdf_bytes: bytes) -> bytes:
        try:
            with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
                if not pdf.pages:
                    raise RenderError("PDF has no pages")
                image = pdf.pages[0].to_image(resolution=self.resolution)
                buf = io.BytesIO()
                image.save(buf, format="PNG")
        except RenderError:
            raise
        except Exception as e:
            # pdfplumber surfaces pdfminer/pypdfium2 errors for corrupt files
            raise RenderError(f"could not read PDF, the file may be damaged or unsupported ({e})") from e
        return buf.getvalue()
