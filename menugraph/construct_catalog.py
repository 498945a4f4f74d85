# menugraph/construct_catalog.py
"""
Construct Catalog

Single source of truth for every label the classifier can put on a
product. Used by construct_classifier.py (assignment), construct_stats.py
(ordering of counts), construct_export.py and the portal catalog endpoint.

Each entry carries two identifiers:
  - id:   the label written onto classified records ("Sized", "free-defaults")
  - code: the construct number used on the menu team's constructs page
          ("1BAA", "#9"), so audit exports line up with their docs.

PRIMARY   (5, mutually exclusive)   decided from structural flags
BEHAVIORAL (9, any subset)          read from ingredient groups / product fields
STRUCTURAL (5, any subset)          read from structural flags
COMBO     (#17-#25)                 reference only, never auto-assigned
"""

from __future__ import annotations

from typing import Dict, List, Optional

from .menu_types import ConstructDef


def _c(
    id: str,
    code: str,
    name: str,
    short_name: str,
    kind: str,
    description: str,
    engineering_term: str,
) -> ConstructDef:
    return {
        "id": id,
        "code": code,
        "name": name,
        "short_name": short_name,
        "kind": kind,
        "description": description,
        "engineering_term": engineering_term,
    }


# ── Primary types ───────────────────────────────────

PRIMARY_LEAF = "Leaf"
PRIMARY_CUSTOMIZABLE = "Customizable"
PRIMARY_VIRTUAL = "Virtual"
PRIMARY_SIZED = "Sized"
PRIMARY_SIZED_CUSTOMIZABLE = "Sized+Customizable"

PRIMARY_TYPES: List[ConstructDef] = [
    _c(PRIMARY_LEAF, "1AAA", "No Size/Selection, No Customization", "Leaf", "primary",
       "Standalone item. Cannot be customized or sized.",
       "No alternatives & no ingredientRefs"),
    _c(PRIMARY_CUSTOMIZABLE, "1ABB", "No Size, Customizable", "Customizable", "primary",
       "Has no sizes/selections, but ingredients can be modified or changed.",
       "No alternatives with ingredientRefs"),
    _c(PRIMARY_VIRTUAL, "2", "Virtual Product", "Virtual", "primary",
       "Does not exist in POS. Groups multiple PLUs for a simpler guest experience.",
       "Virtual Product"),
    _c(PRIMARY_SIZED, "1BAA", "Sized, Not Customizable", "Sized", "primary",
       "Has sizes or selections (alternatives), but the recipe cannot be modified.",
       "With alternatives and no ingredientRefs"),
    _c(PRIMARY_SIZED_CUSTOMIZABLE, "1BBB", "Sized + Customizable", "Sized+Custom", "primary",
       "Has sizes/selections and ingredients can also be customized.",
       "With alternatives and ingredientRefs"),
]


# ── Behavioral tags ─────────────────────────────────

TAG_DEFAULTS = "defaults-present"
TAG_NON_REMOVABLE = "non-removable-defaults"
TAG_DEFAULTS_WITH_MAX = "defaults-with-max"
TAG_FREE_DEFAULTS = "free-defaults"
TAG_NO_DEFAULTS = "no-defaults-present"
TAG_INTENSITY = "intensity-options"
TAG_MAX_UNIQUE = "max-unique-choices"
TAG_VOLUME_PRICING = "volume-pricing"
TAG_FREE_QUANTITY = "free-quantity"

BEHAVIORAL_TAGS: List[ConstructDef] = [
    _c(TAG_DEFAULTS, "#6", "Pre-selected Ingredients", "Defaults", "behavioral",
       "Ingredients have default choices pre-selected for customers.",
       "with Default ingredientRefs"),
    _c(TAG_NON_REMOVABLE, "#7", "Non-removable Defaults", "Non-removable", "behavioral",
       "Pre-selected ingredients that the customer cannot remove.",
       "with Default ingredientRefs and non-removable"),
    _c(TAG_DEFAULTS_WITH_MAX, "#8", "Defaults + Max Selection", "Max Select", "behavioral",
       "Pre-selected ingredients with a maximum number of selections.",
       "with ingredientRefs, defaults, max selection"),
    _c(TAG_FREE_DEFAULTS, "#9", "Free Default Ingredients", "Free Defaults", "behavioral",
       "Pre-selected ingredients that are free of additional charge.",
       "with ingredientRefs, defaults, free"),
    _c(TAG_NO_DEFAULTS, "#10", "No Default Ingredients", "No Defaults", "behavioral",
       "Ingredients available but none pre-selected. Customer must choose.",
       "with ingredientRefs, no defaults"),
    _c(TAG_INTENSITY, "#11", "Intensity Options", "Intensity", "behavioral",
       "Ingredients with intensity levels (Easy / Regular / Extra).",
       "with ingredientRefs with Intensity"),
    _c(TAG_MAX_UNIQUE, "#13", "Max Unique Choices", "MaxUnique", "behavioral",
       "Product limits the number of distinct choices.",
       "maxUniqueChoices"),
    _c(TAG_VOLUME_PRICING, "#14", "Volume Pricing", "VolPrice", "behavioral",
       "Price changes based on quantity.",
       "volumePricing"),
    _c(TAG_FREE_QUANTITY, "#15", "Free Quantity", "FreeQty", "behavioral",
       "Selection quantity includes free items (e.g. first N toppings free).",
       "freeQuantity"),
]


# ── Structural tags ─────────────────────────────────

TAG_BARE = "bare"
TAG_HAS_MODIFIERS = "has-modifiers"
TAG_HAS_BUNDLE = "has-bundle"
TAG_IS_COMBO = "is-combo"
TAG_VIRTUAL_INGREDIENT = "virtual-ingredient"

STRUCTURAL_TAGS: List[ConstructDef] = [
    _c(TAG_BARE, "S1", "Bare Product", "Bare", "structural",
       "No ingredientRefs and no modifierGroupRefs.",
       "no ingredientRefs, no modifierGroupRefs"),
    _c(TAG_HAS_MODIFIERS, "S2", "Has Modifier Groups", "Modifiers", "structural",
       "Product carries add-on modifier groups.",
       "modifierGroupRefs"),
    _c(TAG_HAS_BUNDLE, "S3", "Bundle Link", "Bundle", "structural",
       "Product links to a combo/meal counterpart.",
       "relatedProducts.bundle"),
    _c(TAG_IS_COMBO, "S4", "Combo Product", "Combo", "structural",
       "Product is flagged as a combo/meal.",
       "isCombo"),
    _c(TAG_VIRTUAL_INGREDIENT, "S5", "Virtual With Ingredients", "Virtual+Ingr", "structural",
       "Virtual product carrying ingredientRefs but no alternatives. Likely a data-entry error.",
       "isVirtual, ingredientRefs, no alternatives"),
]


# ── Combo / meal / bundle (reference only) ──────────

COMBO_CONSTRUCTS: List[ConstructDef] = [
    _c("single-entree", "#17", "Single Entree, No Size", "1 Entree", "combo",
       "Combo/Meal with one entree, no size/selection.",
       "Single Entree without Alternatives"),
    _c("single-entree-sized", "#18", "Single Entree, Sized", "1 Entree+Size", "combo",
       "Combo/Meal allowing entree variant selection (single / double / triple).",
       "Single Entree with Alternatives"),
    _c("multi-entree", "#19", "Multiple Entrees", "Multi-Entree", "combo",
       "Bundle where the customer selects more than one entree.",
       "Multiple Entrees"),
    _c("deal", "#20", "Deals", "Deal", "combo",
       "Discounted Combo/Meal/Bundle, usually with its own PLU.",
       "Deals, negative pricing"),
    _c("drink-combo-plu", "#21", "Drinks w/ Combo PLUs", "DrinkPLU", "combo",
       "Drinks with individual PLUs for size/flavor combos, shown as one product.",
       "Drinks with Combination PLUs"),
    _c("side-pick", "#22", "Side: No Default", "Side (pick)", "combo",
       "Combo/Meal side options without a pre-selected side.",
       "Side Options without default"),
    _c("side-default", "#23", "Side: Pre-Selected", "Side (default)", "combo",
       "Combo/Meal side options with a pre-selected default side.",
       "Side Options with default"),
    _c("drink-pick", "#24", "Drink: No Default", "Drink (pick)", "combo",
       "Combo/Meal drink options without a pre-selected drink.",
       "Drink Options without default"),
    _c("drink-default", "#25", "Drink: Pre-Selected", "Drink (default)", "combo",
       "Combo/Meal drink options with a pre-selected default drink.",
       "Drink Options with default"),
]

ALL_CONSTRUCTS: List[ConstructDef] = (
    PRIMARY_TYPES + BEHAVIORAL_TAGS + STRUCTURAL_TAGS + COMBO_CONSTRUCTS
)

PRIMARY_TYPE_IDS: List[str] = [c["id"] for c in PRIMARY_TYPES]
BEHAVIORAL_TAG_IDS: List[str] = [c["id"] for c in BEHAVIORAL_TAGS]
STRUCTURAL_TAG_IDS: List[str] = [c["id"] for c in STRUCTURAL_TAGS]

_BY_KEY: Dict[str, ConstructDef] = {}
for _def in ALL_CONSTRUCTS:
    _BY_KEY[_def["id"]] = _def
    _BY_KEY[_def["code"]] = _def


def get_construct(key: str) -> Optional[ConstructDef]:
    """Look up a construct by label ("Sized") or code ("1BAA")."""
    return _BY_KEY.get(key)


def construct_code(key: str) -> str:
    """Code for a label, or the key itself when unknown."""
    found = _BY_KEY.get(key)
    return found["code"] if found else key
