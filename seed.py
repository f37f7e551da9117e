"""
Sample menu catalog for development databases.

Loaded at startup when SEED_DATABASE is enabled and the catalog is empty.
"""
import logging
from typing import List

from database import count_documents, insert_documents
from schemas import Category, MenuItem

logger = logging.getLogger(__name__)

_IMG = "https://images.unsplash.com/{}?w=500&auto=format&fit=crop&q=60"


def _item(name: str, description: str, price: float, category: Category, photo: str) -> MenuItem:
    return MenuItem(name=name, description=description, price=price, image=_IMG.format(photo), category=category)


SAMPLE_MENU: List[MenuItem] = [
    _item("Margherita Pizza", "Tomato sauce, fresh mozzarella and basil on a thin crust.",
          12.99, Category.PIZZA, "photo-1574071318508-1cdbab80d002"),
    _item("Pepperoni Pizza", "Spicy pepperoni over mozzarella and house tomato sauce.",
          14.99, Category.PIZZA, "photo-1628840042765-356cda07504e"),
    _item("BBQ Chicken Pizza", "Grilled chicken, red onion and cilantro with smoky BBQ sauce.",
          15.99, Category.PIZZA, "photo-1513104890138-7c749659a591"),
    _item("Classic Cheeseburger", "Beef patty, cheddar, lettuce, tomato and pickles on brioche.",
          10.99, Category.BURGERS, "photo-1568901346375-23c9450c58cd"),
    _item("Bacon Deluxe Burger", "Beef patty with crispy bacon, caramelized onions and BBQ sauce.",
          13.99, Category.BURGERS, "photo-1594212699903-ec8a3eca50f5"),
    _item("Veggie Burger", "Plant-based patty with avocado and sprouts on a whole wheat bun.",
          11.99, Category.BURGERS, "photo-1520072959219-c595dc870360"),
    _item("Spaghetti Carbonara", "Spaghetti tossed with pancetta, egg, pecorino and black pepper.",
          13.99, Category.PASTA, "photo-1612874742237-6526221588e3"),
    _item("Fettuccine Alfredo", "Ribbon pasta in a rich parmesan cream sauce.",
          14.99, Category.PASTA, "photo-1645112411341-6c4fd023714a"),
    _item("Garlic Bread", "Toasted baguette with garlic butter and herbs.",
          5.99, Category.SIDES, "photo-1619535860434-ba1d8fa12536"),
    _item("Caesar Salad", "Romaine, croutons and parmesan with Caesar dressing.",
          7.99, Category.SIDES, "photo-1550304943-4f24f54ddde9"),
    _item("French Fries", "Crispy golden fries with sea salt.",
          4.99, Category.SIDES, "photo-1573080496219-bb080dd4f877"),
    _item("Fresh Lemonade", "Squeezed to order with a hint of mint.",
          3.99, Category.DRINKS, "photo-1621263764928-df1444c5e859"),
    _item("Iced Coffee", "Cold brew over ice with your choice of milk.",
          4.49, Category.DRINKS, "photo-1517701604599-bb29b565090c"),
    _item("Chocolate Milkshake", "Thick chocolate shake topped with whipped cream.",
          5.99, Category.DRINKS, "photo-1572490122747-3968b75cc699"),
    _item("Chocolate Lava Cake", "Warm chocolate cake with a molten center.",
          7.99, Category.DESSERTS, "photo-1624353365286-3f8d62daad51"),
    _item("New York Cheesecake", "Creamy baked cheesecake on a graham cracker crust.",
          6.99, Category.DESSERTS, "photo-1533134242443-d4fd215305ad"),
    _item("Tiramisu", "Espresso-soaked ladyfingers layered with mascarpone.",
          7.49, Category.DESSERTS, "photo-1571877227200-a0d98ea607e9"),
]


def seed_menu() -> int:
    """Insert the sample menu if the catalog is empty; returns items inserted."""
    if count_documents("menuitem") > 0:
        logger.info("Menu already contains items, skipping seed")
        return 0
    inserted = insert_documents("menuitem", SAMPLE_MENU)
    logger.info("Seeded %d menu items", len(inserted))
    return len(inserted)
