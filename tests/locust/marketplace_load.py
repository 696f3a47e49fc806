"""
Locust load testing script for the Monlyking API.
Simulates buyers and sellers browsing listings, chatting and purchasing.

    locust -f tests/locust/marketplace_load.py --host http://localhost:8000
"""
import random
from locust import HttpUser, task, between, events
from faker import Faker

fake = Faker()

GAME_DATA = {
    "fifa": lambda: {
        "platform": random.choice(["PS5", "Xbox", "PC"]),
        "coins": random.randint(0, 5_000_000),
        "level": random.randint(1, 100),
        "overall_rating": random.randint(60, 99),
        "region": random.choice(["EU", "NA", "MENA"]),
    },
    "valorant": lambda: {
        "rank": random.choice(["Gold 2", "Diamond 1", "Immortal 3"]),
        "rr": random.randint(0, 100),
        "agents": random.randint(5, 25),
        "level": random.randint(20, 400),
        "region": random.choice(["EU", "NA", "AP"]),
    },
    "cod": lambda: {
        "rank": random.choice(["Veteran", "Legendary"]),
        "level": random.randint(1, 155),
        "prestige": random.randint(0, 10),
        "region": "EU",
    },
}


class MarketplaceUser(HttpUser):
    """
    Simulates a marketplace user with realistic behavior patterns.
    """

    wait_time = between(1, 5)

    def on_start(self):
        self.user_id = None
        self.auth_token = None
        self.listings = []

        # 70% of users register/login, 30% browse anonymously
        if random.random() < 0.7:
            self.register_and_login()

    def register_and_login(self):
        email = f"{fake.user_name()}{random.randint(1000, 9999)}@monlyking.gg"
        username = f"{fake.user_name()[:12]}{random.randint(1000, 9999)}".replace(".", "_")
        password = "Test123456!"

        with self.client.post(
            "/api/v1/auth/register",
            json={"email": email, "username": username, "password": password, "display_name": fake.name()},
            catch_response=True,
            name="/api/v1/auth/register"
        ) as response:
            if response.status_code == 201:
                self.user_id = response.json()["id"]
                response.success()
            elif response.status_code == 400:
                # Email or username already taken
                response.success()

        with self.client.post(
            "/api/v1/auth/login",
            json={"email": email, "password": password},
            catch_response=True,
            name="/api/v1/auth/login"
        ) as response:
            if response.status_code == 200:
                self.auth_token = response.json()["access_token"]
                response.success()

    @property
    def auth_headers(self):
        if self.auth_token:
            return {"Authorization": f"Bearer {self.auth_token}"}
        return {}

    @task(10)
    def browse_listings(self):
        """Browse listings - most common action."""
        params = {
            "page": random.randint(1, 5),
            "page_size": random.choice([10, 20, 50]),
        }
        if random.random() < 0.5:
            params["game"] = random.choice(list(GAME_DATA))

        with self.client.get(
            "/api/v1/listings/",
            params=params,
            catch_response=True,
            name="/api/v1/listings/ [browse]"
        ) as response:
            if response.status_code == 200:
                data = response.json()
                if data.get("items"):
                    self.listings = data["items"]
                response.success()

    @task(5)
    def search_listings(self):
        with self.client.get(
            "/api/v1/listings/",
            params={"search": random.choice(["immortal", "prestige", "coins", "skins", "rare"])},
            catch_response=True,
            name="/api/v1/listings/ [search]"
        ) as response:
            if response.status_code == 200:
                response.success()

    @task(8)
    def view_listing(self):
        listing_id = random.choice(self.listings)["id"] if self.listings else random.randint(1, 100)

        with self.client.get(
            f"/api/v1/listings/{listing_id}",
            catch_response=True,
            name="/api/v1/listings/{id}"
        ) as response:
            if response.status_code in [200, 404]:
                response.success()

    @task(3)
    def create_listing(self):
        """Put an account up for sale (authenticated users only)."""
        if not self.auth_token:
            return

        game = random.choice(list(GAME_DATA))
        listing_data = {
            "game": game,
            "title": f"{game.upper()} account {fake.word()} {random.randint(100, 999)}",
            "description": fake.text(max_nb_chars=300).ljust(60, "."),
            "price": round(random.uniform(100, 5000), 2),
            "game_data": GAME_DATA[game](),
        }

        with self.client.post(
            "/api/v1/listings/",
            json=listing_data,
            headers=self.auth_headers,
            catch_response=True,
            name="/api/v1/listings/ [create]"
        ) as response:
            if response.status_code in [201, 401, 422]:
                response.success()

    @task(2)
    def purchase(self):
        """Try to buy a listing; most attempts fail on wallet balance."""
        if not self.auth_token or not self.listings:
            return

        with self.client.post(
            "/api/v1/orders/",
            json={"account_id": random.choice(self.listings)["id"]},
            headers=self.auth_headers,
            catch_response=True,
            name="/api/v1/orders/ [create]"
        ) as response:
            if response.status_code in [201, 400, 401, 404, 409]:
                response.success()

    @task(2)
    def send_message(self):
        if not self.auth_token or not self.listings:
            return

        listing = random.choice(self.listings)
        if random.random() < 0.3:
            message = {
                "type": "offer",
                "content": "Would you take this?",
                "offer_price": round(listing["price"] * 0.9, 2),
                "original_price": listing["price"],
                "product_id": listing["id"],
            }
        else:
            message = {"type": "text", "content": fake.sentence(nb_words=10)}

        with self.client.post(
            f"/api/v1/chats/{listing['seller_id']}/messages",
            json=message,
            headers=self.auth_headers,
            catch_response=True,
            name="/api/v1/chats/{id}/messages [send]"
        ) as response:
            if response.status_code in [201, 400, 401, 404]:
                response.success()

    @task(1)
    def check_chats(self):
        if not self.auth_token:
            return

        with self.client.get(
            "/api/v1/chats/",
            headers=self.auth_headers,
            catch_response=True,
            name="/api/v1/chats/ [list]"
        ) as response:
            if response.status_code in [200, 401]:
                response.success()

    @task(1)
    def check_wallet(self):
        if not self.auth_token:
            return

        with self.client.get(
            "/api/v1/wallet/",
            headers=self.auth_headers,
            catch_response=True,
            name="/api/v1/wallet/"
        ) as response:
            if response.status_code in [200, 401]:
                response.success()

    @task(1)
    def health_check(self):
        with self.client.get("/health", catch_response=True, name="/health") as response:
            if response.status_code == 200:
                response.success()


class HeavyUser(HttpUser):
    """
    Simulates heavy users who create lots of traffic.
    Used for stress testing.
    """

    wait_time = between(0.1, 0.5)
    weight = 1

    @task
    def rapid_fire_requests(self):
        endpoint = random.choice([
            "/health",
            "/api/v1/listings/?page=1",
            "/api/v1/listings/1",
            "/api/v1/wallet/fees?amount=1000",
        ])
        self.client.get(endpoint, name="[stress test]")


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("Load test starting...")


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    print("Load test completed.")
    print(f"Total users: {environment.runner.user_count}")
