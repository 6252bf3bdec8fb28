"""
Message Builder for the Ordering State Machine.

This module builds every prompt the bot sends: menus, quantity and checkout
questions, cart and order summaries, and the corrective messages for stale
buttons. Text is available in English and Myanmar; keys without a Myanmar
translation fall back to English.
"""

from .models import CartItem, UserState
from .pricing import PricingEngine
from .schemas import (
    CarouselButton,
    CarouselElement,
    OutboundMessage,
    QuickReply,
)
from .parsers import MIN_QUANTITY, MAX_QUANTITY, MIN_STARS, MAX_STARS, QUICK_ORDER_PRODUCTS


TEXTS = {
    "welcome": {
        "en": (
            "Hi there! 👋 မင်္ဂလာပါ! 👋\n\n"
            "I'm BakeFlow Bot, your virtual bakery assistant. 🍰\n\n"
            "Please select your language to get started.\n"
            "စတင်ဖို့ ဘာသာစကားကို ရွေးချယ်ပါ။"
        ),
    },
    "choose_language": {"en": "Choose your language / ဘာသာစကား ရွေးပါ:"},
    "language_selected": {
        "en": "✅ English selected!",
        "my": "✅ မြန်မာဘာသာ ရွေးချယ်ပြီးပါပြီ!",
    },
    "main_menu_title": {
        "en": "🍰 Welcome to BakeFlow!",
        "my": "🍰 BakeFlow မှ ကြိုဆိုပါတယ်!",
    },
    "closed": {
        "en": "⏰ Sorry, we're closed right now.\n\nOpening hours: {hours}\nPlease come back then! 🍰",
        "my": "⏰ ယခု ဆိုင်ပိတ်ထားပါသည်။\n\nဖွင့်ချိန်: {hours}",
    },
    "menu_empty": {"en": "😔 Our menu is being updated. Please check back soon!"},
    "choose_product": {"en": "👇 Please choose a product from the list."},
    "ask_quantity": {"en": "How many {emoji} {product} would you like?"},
    "item_added": {"en": "✅ {quantity}× {emoji} {product} added\n\nCart: {total} items"},
    "ask_name": {
        "en": "Great! What's your name?",
        "my": "📝 သင်၏နာမည်ကဘာလဲ?",
    },
    "ask_delivery_type": {"en": "Thanks, {name}! Would you like pickup or delivery?"},
    "ask_address": {"en": "Perfect! Please type your delivery address:\n(Street, City, ZIP)"},
    "cart_empty": {"en": "🛒 Your cart is empty!\n\nLet's start ordering!"},
    "order_cancelled": {
        "en": "❌ Order cancelled.",
        "my": "❌ အော်ဒါ ပယ်ဖျက်ပြီးပါပြီ။",
    },
    "start_fresh": {"en": "Ready to start fresh? Type 'menu' to see our products!"},
    "stale_action": {"en": "⚠️ Please complete your current step first, or type 'cancel' to start over."},
    "select_product_first": {"en": "⚠️ Please select a product first!"},
    "not_understood": {"en": "Sorry, I didn't understand that. Let's start over!"},
    "product_not_found": {"en": "❌ Product not found"},
    "order_failed": {"en": "⚠️ Sorry, we couldn't place your order right now. Your cart is saved, please try again."},
    "quick_added": {
        "en": "✅ Added {emoji} {product} to cart!",
        "my": "✅ {emoji} {product} စတုံအိုးသို့ ထည့်သွင်းပြီး!",
    },
    "quick_cart_empty": {"en": "🛒 Cart is empty. Add items to get started!"},
    "quick_checkout_empty": {"en": "❌ Cart is empty. Please add items first!"},
    "quick_cleared": {
        "en": "🗑️ Cart cleared!",
        "my": "🗑️ စတုံအိုးအလွတ်ပြီး!",
    },
    "what_next": {"en": "What next?"},
    "no_orders": {"en": "📦 You don't have any orders yet.\n\nType 'menu' to place your first order!"},
    "order_not_found": {"en": "❌ Sorry, we couldn't find that order."},
    "ask_rating": {"en": "⭐ How would you rate order #{order_id}?"},
    "rating_not_delivered": {"en": "You can rate order #{order_id} once it has been delivered."},
    "already_rated": {"en": "You've already rated order #{order_id}. Thank you! 💛"},
    "rating_thanks": {"en": "Thank you for rating us {stars}⭐! 💛\n\nType 'menu' to order again! 🍰"},
    "rating_skipped": {"en": "No problem! Feel free to rate us anytime.\n\nType 'menu' to order again! 🍰"},
    "reorder_intro": {"en": "🔁 Reordering from order #{order_id}:"},
}

ABOUT_TEXT = {
    "en": (
        "🏪 About Us\n\n"
        "BakeFlow is your neighborhood bakery, baking fresh daily!\n\n"
        "📍 Location: Yangon, Myanmar\n"
        "⏰ Hours: {hours}\n\n"
        "❓ How to Use\n\n"
        "You can type naturally:\n\n"
        "• \"menu\" or \"show products\"\n"
        "• \"I want chocolate cake\"\n"
        "• \"two\" or \"2\"\n"
        "• \"delivery please\" or \"pickup\"\n"
        "• \"cancel\" or \"start over\"\n\n"
        "🛒 Type 'menu' to start ordering!"
    ),
    "my": (
        "🏪 ကျွန်ုပ်တို့အကြောင်း\n\n"
        "BakeFlow သည် လတ်ဆတ်သော မုန့်များကို နေ့စဉ် ဖုတ်လုပ်သော မုန့်ဆိုင်ဖြစ်ပါသည်။\n\n"
        "📍 တည်နေရာ: ရန်ကုန်မြို့\n"
        "⏰ ဖွင့်ချိန်: {hours}\n\n"
        "🛒 အော်ဒါမှာရန် 'menu' လို့ရိုက်ပါ!"
    ),
}

BACK = QuickReply(title="⬅️ Back", payload="GO_BACK")
CANCEL = QuickReply(title="❌ Cancel", payload="CANCEL_ORDER")

STATUS_ICONS = {
    "pending": "⏳",
    "preparing": "👩‍🍳",
    "ready": "✅",
    "delivered": "🎉",
}


class MessageBuilder:
    """
    Handles message construction for the ordering state machine.

    Needs the pricing engine for summaries and the opening hours text for
    the closed notice.
    """

    def __init__(self, pricing: PricingEngine, hours_text: str = "8:00 AM - 8:00 PM"):
        self.pricing = pricing
        self.hours_text = hours_text

    def text(self, key: str, lang: str = "en", **kwargs) -> str:
        """Look up a message in the user's language, falling back to English."""
        variants = TEXTS[key]
        template = variants.get(lang) or variants["en"]
        return template.format(**kwargs) if kwargs else template

    def say(self, key: str, lang: str = "en", **kwargs) -> OutboundMessage:
        return OutboundMessage.plain(self.text(key, lang, **kwargs))

    # -------------------------------------------------------------------------
    # Language and menus
    # -------------------------------------------------------------------------

    def language_selection(self) -> list[OutboundMessage]:
        return [
            self.say("welcome"),
            OutboundMessage.with_replies(
                self.text("choose_language"),
                [
                    QuickReply(title="🇬🇧 English", payload="LANG_EN"),
                    QuickReply(title="🇲🇲 မြန်မာ", payload="LANG_MY"),
                ],
            ),
        ]

    def main_menu(self, lang: str) -> list[OutboundMessage]:
        if lang == "my":
            cards = [
                ("🛒 အော်ဒါမှာမယ်", "ကျွန်ုပ်တို့၏ လတ်ဆတ်သော မုန့်များကို ကြည့်ရှုပါ", "လုပ်ဆောင်မည်", "MENU_ORDER_PRODUCTS"),
                ("⚡ အမြန်မှာမယ်", "လူကြိုက်များသော မုန့်များ", "မှာမည်", "QUICK_SHOP"),
                ("📦 ကျွန်ုပ်၏အော်ဒါများ", "ယခင်အော်ဒါများ", "ကြည့်မည်", "MENU_ORDER_HISTORY"),
                ("ℹ️ အကြောင်းနှင့်အကူအညီ", "ကျွန်ုပ်တို့အကြောင်းနှင့် အသုံးပြုနည်း", "ဖတ်ရှုမည်", "MENU_ABOUT"),
                ("🌐 ဘာသာပြောင်းမယ်", "English သို့ ပြောင်းလဲရန်", "ပြောင်းမည်", "MENU_CHANGE_LANG"),
            ]
        else:
            cards = [
                ("🛒 Order Now", "Browse our fresh baked goods", "Start Order", "MENU_ORDER_PRODUCTS"),
                ("⚡ Quick Order", "Our best sellers in one tap", "Quick Shop", "QUICK_SHOP"),
                ("📦 My Orders", "Reorder or rate past orders", "View Orders", "MENU_ORDER_HISTORY"),
                ("ℹ️ About & Help", "Learn about us and how to order", "Learn More", "MENU_ABOUT"),
                ("🌐 Change Language", "Switch to Myanmar language", "Switch", "MENU_CHANGE_LANG"),
            ]
        elements = [
            CarouselElement(title=title, subtitle=subtitle, buttons=[CarouselButton(button, payload)])
            for title, subtitle, button, payload in cards
        ]
        return [self.say("main_menu_title", lang), OutboundMessage.carousel(elements)]

    def product_list(self, products) -> OutboundMessage:
        """Carousel of catalog products with an Order button each."""
        elements = [
            CarouselElement(
                title=f"{p.emoji} {p.name}",
                subtitle=f"{p.description} • ${p.price:.2f}" if p.description else f"${p.price:.2f}",
                image_url=p.image_url,
                buttons=[CarouselButton("🛒 Order", f"ORDER_PRODUCT_{p.id}")],
            )
            for p in products
        ]
        return OutboundMessage.carousel(elements)

    def text_menu(self, products) -> OutboundMessage:
        lines = ["🍰 BakeFlow Menu\n"]
        for p in products:
            lines.append(f"  • {p.emoji} {p.name} - ${p.price:.2f}")
        lines.append("\n👇 Tap a product below to order!")
        return OutboundMessage.plain("\n".join(lines))

    def about(self, lang: str) -> OutboundMessage:
        template = ABOUT_TEXT.get(lang) or ABOUT_TEXT["en"]
        return OutboundMessage.plain(template.format(hours=self.hours_text))

    def closed(self, lang: str) -> OutboundMessage:
        return self.say("closed", lang, hours=self.hours_text)

    # -------------------------------------------------------------------------
    # Cart building
    # -------------------------------------------------------------------------

    def ask_quantity(self, state: UserState) -> OutboundMessage:
        item = state.pending_item
        replies = [
            QuickReply(title=str(n), payload=f"QTY_{n}")
            for n in range(MIN_QUANTITY, MAX_QUANTITY + 1)
        ]
        return OutboundMessage.with_replies(
            self.text("ask_quantity", state.lang, emoji=item.emoji, product=item.product),
            replies + [BACK, CANCEL],
        )

    def item_added(self, state: UserState, item: CartItem) -> OutboundMessage:
        total = state.total_quantity()
        return OutboundMessage.with_replies(
            self.text(
                "item_added", state.lang,
                quantity=item.quantity, emoji=item.emoji, product=item.product, total=total,
            ),
            [
                QuickReply(title="Add More", payload="ADD_MORE_ITEMS"),
                QuickReply(title=f"Checkout ({total})", payload="CHECKOUT"),
                CANCEL,
            ],
        )

    def cart_decision(self, state: UserState) -> OutboundMessage:
        """Re-show the add-more/checkout choice for the current cart."""
        total = state.total_quantity()
        return OutboundMessage.with_replies(
            self.cart(state) + "\n\nAdd more or check out?",
            [
                QuickReply(title="Add More", payload="ADD_MORE_ITEMS"),
                QuickReply(title=f"Checkout ({total})", payload="CHECKOUT"),
                CANCEL,
            ],
        )

    def cart(self, state: UserState) -> str:
        lines = ["🛒 Your Cart:\n"]
        for item in state.cart:
            lines.append(f"• {item.get_summary()}")
        lines.append(f"\nTotal Items: {state.total_quantity()}")
        return "\n".join(lines)

    # -------------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------------

    def ask_name(self, state: UserState) -> OutboundMessage:
        return OutboundMessage.with_replies(
            self.text("ask_name", state.lang),
            [QuickReply(title="⬅️ Back to Cart", payload="GO_BACK"), CANCEL],
        )

    def ask_delivery_type(self, state: UserState) -> OutboundMessage:
        return OutboundMessage.with_replies(
            self.text("ask_delivery_type", state.lang, name=state.customer_name),
            [
                QuickReply(title="🏠 Pickup", payload="PICKUP"),
                QuickReply(title="🚚 Delivery", payload="DELIVERY"),
                BACK,
                CANCEL,
            ],
        )

    def ask_address(self, state: UserState) -> OutboundMessage:
        return OutboundMessage.with_replies(self.text("ask_address", state.lang), [BACK, CANCEL])

    def order_summary(self, state: UserState) -> OutboundMessage:
        """Itemized summary with pricing breakdown and Confirm/Cancel."""
        lines = []
        for item in state.cart:
            lines.append(f"• {item.get_summary()} - ${self.pricing.line_total(item):.2f}")

        totals = self.pricing.calculate_order_totals(state.cart, state.delivery_type, state.address)
        delivery_icon = "🚚" if state.delivery_type == "delivery" else "🏠"

        summary = (
            "📋 Order Summary\n\n"
            "🛒 Your Items:\n"
            + "\n".join(lines)
            + "\n\n💰 Pricing:\n"
            f"Subtotal: ${totals.subtotal:.2f}\n"
            f"Delivery Fee: ${totals.delivery_fee:.2f}\n"
            "━━━━━━━━━━━━\n"
            f"Total: ${totals.total:.2f}\n\n"
            f"👤 Customer: {state.customer_name}\n"
            f"{delivery_icon} {(state.delivery_type or 'pickup').title()}\n"
            f"📍 Address: {state.address}\n\n"
            "Everything look good?"
        )
        return OutboundMessage.with_replies(
            summary,
            [
                QuickReply(title="✅ Confirm Order", payload="CONFIRM_ORDER"),
                BACK,
                CANCEL,
            ],
        )

    def order_confirmed(self, state: UserState, order_id: int) -> OutboundMessage:
        totals = self.pricing.calculate_order_totals(state.cart, state.delivery_type, state.address)
        items = "\n".join(item.get_summary() for item in state.cart[:5])
        if len(state.cart) > 5:
            items += "\n...and more"
        return OutboundMessage.plain(
            "🎉 Order Confirmed!\n\n"
            f"Order #{order_id}\n"
            f"{items}\n\n"
            f"Total: ${totals.total:.2f}\n"
            "Status: ⏳ Pending\n\n"
            "We'll start preparing your order soon!"
        )

    def order_failed(self, lang: str) -> OutboundMessage:
        return OutboundMessage.with_replies(
            self.text("order_failed", lang),
            [QuickReply(title="🔄 Try Again", payload="CONFIRM_ORDER"), CANCEL],
        )

    def cancelled(self, lang: str) -> list[OutboundMessage]:
        return [self.say("order_cancelled", lang), self.say("start_fresh", lang)]

    # -------------------------------------------------------------------------
    # Quick order
    # -------------------------------------------------------------------------

    def quick_order_form(self) -> OutboundMessage:
        elements = []
        for key, (product, emoji) in QUICK_ORDER_PRODUCTS.items():
            elements.append(CarouselElement(
                title=f"{emoji} {product}",
                subtitle=f"${self.pricing.unit_price(product):.2f}",
                buttons=[
                    CarouselButton("➕ +1", f"QUICK_ADD_{key}"),
                    CarouselButton("🛒 View", f"QUICK_VIEW_{key}"),
                ],
            ))
        elements.append(CarouselElement(
            title="📋 My Cart",
            subtitle="Review items & checkout",
            buttons=[
                CarouselButton("View Cart", "QUICK_SHOW_CART"),
                CarouselButton("Proceed", "QUICK_CHECKOUT"),
            ],
        ))
        return OutboundMessage.carousel(elements)

    def quick_cart_summary(self, state: UserState) -> OutboundMessage:
        if not state.cart:
            return self.say("quick_cart_empty", state.lang)

        lines = ["🛒 Your Cart:\n"]
        for item in state.cart:
            lines.append(f"{item.emoji} {item.product} × {item.quantity} = ${self.pricing.line_total(item):.2f}")
        subtotal = self.pricing.calculate_order_totals(state.cart, "pickup").subtotal
        lines.append(f"\nTotal: ${subtotal:.2f}")

        return OutboundMessage.with_replies(
            "\n".join(lines),
            [
                QuickReply(title="➕ Add More", payload="QUICK_ADD_MORE"),
                QuickReply(title="🛒 Review", payload="QUICK_SHOW_CART"),
                QuickReply(title="✅ Checkout", payload="QUICK_CHECKOUT"),
                QuickReply(title="❌ Clear", payload="QUICK_CLEAR_CART"),
            ],
        )

    def quick_cleared(self, lang: str) -> list[OutboundMessage]:
        return [
            self.say("quick_cleared", lang),
            OutboundMessage.with_replies(
                self.text("what_next", lang),
                [
                    QuickReply(title="🛍️ Shop", payload="QUICK_SHOP"),
                    QuickReply(title="🏠 Home", payload="MENU_ORDER"),
                ],
            ),
        ]

    # -------------------------------------------------------------------------
    # History and rating
    # -------------------------------------------------------------------------

    def order_history(self, orders) -> OutboundMessage:
        lines = ["📦 Your Recent Orders:\n"]
        replies = []
        for order in orders:
            icon = STATUS_ICONS.get(order.status, "•")
            lines.append(
                f"#{order.id} {icon} {order.status.title()} - "
                f"{order.total_items} items - ${order.total_amount:.2f}"
            )
            replies.append(QuickReply(title=f"🔁 #{order.id}", payload=f"REORDER_{order.id}"))
            if order.status == "delivered" and order.rating_id is None:
                replies.append(QuickReply(title=f"⭐ #{order.id}", payload=f"RATE_ORDER_{order.id}"))
        replies.append(QuickReply(title="🏠 Home", payload="MAIN_MENU"))
        return OutboundMessage.with_replies("\n".join(lines), replies)

    def ask_rating(self, lang: str, order_id: int) -> OutboundMessage:
        replies = [
            QuickReply(title="⭐" * n, payload=f"RATING_{n}")
            for n in range(MAX_STARS, MIN_STARS - 1, -1)
        ]
        replies.append(QuickReply(title="Skip", payload="SKIP_RATING"))
        return OutboundMessage.with_replies(self.text("ask_rating", lang, order_id=order_id), replies)
