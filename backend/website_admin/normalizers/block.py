from website_admin.domain.content import LOCALES


def normalize_block(block):
    value = block.value or {}
    return {
        "id": block.id,
        "key": block.key,
        "type": block.type,
        "value": {locale: value.get(locale) for locale in LOCALES},
    }
