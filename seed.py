# Creates and fills a small demo schema ("stores", "customers", "orders")
# in the database described by DB_* environment variables

import argparse
import random

from faker import Faker

import config
from db import Database
from models import ConnectionProfile

CITIES = ["Bengaluru", "Mumbai", "Delhi", "Chennai"]

DDL = """
CREATE TABLE IF NOT EXISTS stores (
    id SERIAL PRIMARY KEY,
    city TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS customers (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL,
    city TEXT,
    age INTEGER
);
CREATE TABLE IF NOT EXISTS orders (
    id SERIAL PRIMARY KEY,
    customer_id INTEGER NOT NULL REFERENCES customers(id),
    store_id INTEGER NOT NULL REFERENCES stores(id),
    order_date DATE NOT NULL,
    total NUMERIC(10, 2),
    returned BOOLEAN NOT NULL DEFAULT FALSE
)
"""


def fake_customers(fake: Faker, n: int) -> list[tuple]:
    return [(fake.name(), random.choice(CITIES), random.randint(18, 65)) for _ in range(n)]


def fake_orders(fake: Faker, customer_ids, store_ids, n: int) -> list[tuple]:
    return [
        (
            random.choice(customer_ids),
            random.choice(store_ids),
            fake.date_between(start_date="-1y", end_date="today"),
            round(random.uniform(100, 5000), 2),
            random.random() < 0.25,  # ~25% returns
        )
        for _ in range(n)
    ]


def seed(database: Database, customers: int = 50, orders: int = 500, seed_value: int = None):
    fake = Faker()
    if seed_value is not None:
        Faker.seed(seed_value)
        random.seed(seed_value)

    with database.connection() as conn:
        with conn.cursor() as cursor:
            cursor.execute(DDL)

            store_ids = []
            for city in CITIES:
                cursor.execute("INSERT INTO stores (city) VALUES (%s) RETURNING id", (city,))
                store_ids.append(cursor.fetchone()[0])

            customer_ids = []
            for row in fake_customers(fake, customers):
                cursor.execute(
                    "INSERT INTO customers (name, city, age) VALUES (%s, %s, %s) RETURNING id", row
                )
                customer_ids.append(cursor.fetchone()[0])

            cursor.executemany(
                """
                INSERT INTO orders (customer_id, store_id, order_date, total, returned)
                VALUES (%s, %s, %s, %s, %s)
                """,
                fake_orders(fake, customer_ids, store_ids, orders),
            )
        conn.commit()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed a demo schema for the NL → SQL chat")
    parser.add_argument("--customers", type=int, default=50)
    parser.add_argument("--orders", type=int, default=500)
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducible data")
    args = parser.parse_args()

    config.configure_logging()
    database = Database(ConnectionProfile.from_env())
    try:
        seed(database, args.customers, args.orders, args.seed)
    finally:
        database.close()

    print("✅ PostgreSQL database seeded successfully")
