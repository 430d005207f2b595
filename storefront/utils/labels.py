"""Display strings for symbolic buy-control states."""
from storefront.engine.selection import CtaState

FALLBACK_LANGUAGE = 'en'

CTA_LABELS = {
    'en': {
        CtaState.NEED_COLOR: 'Select color',
        CtaState.NEED_SIZE: 'Select size',
        CtaState.OUT_OF_STOCK: 'Out of stock',
        CtaState.ADD_TO_CART: 'Add to cart',
        CtaState.UPDATE_DISABLED: 'Update',
        CtaState.UPDATE_ENABLED: 'Update',
    },
    'tr': {
        CtaState.NEED_COLOR: 'Renk seçin',
        CtaState.NEED_SIZE: 'Beden seçin',
        CtaState.OUT_OF_STOCK: 'Stokta yok',
        CtaState.ADD_TO_CART: 'Sepete ekle',
        CtaState.UPDATE_DISABLED: 'Güncelle',
        CtaState.UPDATE_ENABLED: 'Güncelle',
    },
}


def cta_label(state: CtaState, language: str = FALLBACK_LANGUAGE) -> str:
    labels = CTA_LABELS.get((language or '').lower(), CTA_LABELS[FALLBACK_LANGUAGE])
    return labels[state]
