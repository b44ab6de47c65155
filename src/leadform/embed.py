from __future__ import annotations

from urllib.parse import urlencode

from leadform.config import DYNAMIC_FORM_PATH, DYNAMIC_FORM_SHORTCODE, EMBED_HEIGHT, EMBED_WIDTH


def embed_src(base_url: str, embed_path: str, config_id: str | None = None) -> str:
    src = f"{base_url.rstrip('/')}{embed_path}"
    if config_id:
        src = f"{src}?{urlencode({'id': config_id})}"
    return src


def generate_iframe_code(base_url: str, embed_path: str, config_id: str | None = None) -> str:
    src = embed_src(base_url, embed_path, config_id)
    return (
        "<iframe\n"
        f'  src="{src}"\n'
        f'  width="{EMBED_WIDTH}"\n'
        f'  height="{EMBED_HEIGHT}"\n'
        '  style="border:none; border-radius:8px;"\n'
        '  frameborder="0">\n'
        "</iframe>"
    )


def shortcode_name(embed_path: str) -> str:
    segments = [segment for segment in embed_path.split("?", 1)[0].split("/") if segment]
    return segments[-1] if segments else DYNAMIC_FORM_SHORTCODE


def generate_shortcode(embed_path: str, config_id: str | None = None) -> str:
    name = DYNAMIC_FORM_SHORTCODE if embed_path.rstrip("/") == DYNAMIC_FORM_PATH else shortcode_name(embed_path)
    id_attr = f' id="{config_id}"' if config_id else ""
    return f'[{name}{id_attr} width="{EMBED_WIDTH}" height="{EMBED_HEIGHT}"]'


def embed_codes(base_url: str, embed_path: str, config_id: str | None = None) -> dict[str, str]:
    return {
        "iframe": generate_iframe_code(base_url, embed_path, config_id),
        "shortcode": generate_shortcode(embed_path, config_id),
    }
