from jinja2 import Environment, FileSystemLoader, select_autoescape
import os

EXCERPT_LENGTH = 300

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "email_templates")


def excerpt(text: str, length: int = EXCERPT_LENGTH) -> str:
    """截取前 length 個字，超過時補上 ..."""
    text = text or ""
    if len(text) > length:
        return text[:length] + "..."
    return text


# 創建模板引擎實例
templates = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html"])
)

# 添加全局函數
templates.filters["excerpt"] = excerpt


def render(template_name: str, **context) -> str:
    return templates.get_template(template_name).render(**context)
