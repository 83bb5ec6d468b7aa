# hexo_llm_translate/injector.py
"""
生成注入到页面中的 CSS 与脚本，用于在浏览器端按语言切换显示内容。

这一层只读取编排器积累的标题对与缓存内容，不会反过来影响翻译流程。
"""

from collections.abc import Iterable, Mapping

from hexo_llm_translate.types import CacheRecord, TitlePair
from hexo_llm_translate.wrapper import container_class, script_json


def language_styles(source_lang: str = "zh", target_lang: str = "en") -> str:
    """默认显示译文容器，浏览器语言与原文一致时切换为原文容器。"""
    src, dst = container_class(source_lang), container_class(target_lang)
    return f"""
<style>
    .{src} {{ display: none; }}
    .{dst} {{ display: block; }}
    html[lang^="{source_lang}"] .{dst} {{ display: none !important; }}
    html[lang^="{source_lang}"] .{src} {{ display: block !important; }}
</style>
"""


def collect_title_pairs(
    pairs: Iterable[TitlePair], records: Mapping[str, CacheRecord]
) -> list[dict[str, str]]:
    """
    以译文标题为键合并标题对：先取本次运行翻译的，再用缓存中的历史记录补充。
    """
    merged: dict[str, str] = {}
    for pair in pairs:
        if pair.original and pair.translated:
            merged[pair.translated.strip()] = pair.original
    for record in records.values():
        if record.original_title and record.translated_title:
            merged.setdefault(record.translated_title.strip(), record.original_title)
    return [
        {"translated": translated, "original": original}
        for translated, original in merged.items()
    ]


def title_pairs_script(
    pairs: Iterable[TitlePair], records: Mapping[str, CacheRecord]
) -> str:
    collected = collect_title_pairs(pairs, records)
    if not collected:
        return ""
    return f"<script>window._hexo_title_pairs = {script_json(collected)};</script>"


def language_detection_script(source_lang: str = "zh", target_lang: str = "en") -> str:
    """根据 navigator.language 设置 <html lang>，并把页面上的译文标题换回原文标题。"""
    src_title = f"window._{source_lang}_title"
    dst_title = f"window._{target_lang}_title"
    return f"""
<script>
(function() {{
    var userLang = navigator.language || navigator.userLanguage;
    if (userLang && userLang.indexOf({script_json(source_lang)}) === 0) {{
        document.documentElement.setAttribute('lang', {script_json(source_lang)});
        window.addEventListener('DOMContentLoaded', function() {{
            if ({src_title} && {dst_title}) {{
                if (document.title.indexOf({dst_title}) !== -1) {{
                    document.title = document.title.replace({dst_title}, {src_title});
                }} else {{
                    document.title = {src_title};
                }}
                var h1 = document.querySelector('h1');
                if (h1) {{
                    h1.textContent = {src_title};
                }}
            }}
            document.querySelectorAll('[data-{source_lang}-title][data-{target_lang}-title]').forEach(function(el) {{
                var original = el.getAttribute('data-{source_lang}-title');
                var translated = el.getAttribute('data-{target_lang}-title');
                if (!original || !translated) return;
                if (el.textContent.trim() === translated.trim()) {{
                    el.textContent = original;
                }}
                if (el.hasAttribute('title') && el.getAttribute('title').trim() === translated.trim()) {{
                    el.setAttribute('title', original);
                }}
            }});
            var pairs = window._hexo_title_pairs || [];
            if (pairs.length === 0) return;
            var titleMap = {{}};
            pairs.forEach(function(pair) {{
                titleMap[pair.translated.trim()] = pair.original;
            }});
            var replaceTitle = function(el) {{
                var text = el.textContent.trim();
                if (titleMap[text]) {{
                    el.textContent = titleMap[text];
                    return;
                }}
                for (var translated in titleMap) {{
                    if (text.indexOf(translated) !== -1 && text.length <= translated.length * 1.5) {{
                        el.textContent = titleMap[translated];
                        return;
                    }}
                }}
            }};
            var containers = document.querySelectorAll('main, article, .post, .posts, .post-list, .article-list, .card, .content, #content, #main');
            if (containers.length === 0) {{
                containers = [document.body];
            }}
            Array.prototype.forEach.call(containers, function(container) {{
                container.querySelectorAll('h1, h2, h3, .post-title, .article-title, .entry-title, .card-title, a[rel="bookmark"]').forEach(replaceTitle);
            }});
        }});
    }} else {{
        document.documentElement.setAttribute('lang', {script_json(target_lang)});
    }}
}})();
</script>
"""


def build_injections(
    pairs: Iterable[TitlePair],
    records: Mapping[str, CacheRecord],
    source_lang: str = "zh",
    target_lang: str = "en",
) -> dict[str, str]:
    """按注入位置返回三段片段。"""
    return {
        "head_begin": language_detection_script(source_lang, target_lang),
        "head_end": language_styles(source_lang, target_lang),
        "body_end": title_pairs_script(pairs, records),
    }
