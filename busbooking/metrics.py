from prometheus_client import Counter, Histogram

# Booking metrics
BOOKING_ATTEMPTS = Counter("busbooking_booking_attempts_total", "Total create-booking attempts", ["result"])
BOOKING_CANCELS = Counter("busbooking_booking_cancels_total", "Total cancel-booking attempts", ["result"])
COMPENSATIONS = Counter(
    "busbooking_compensations_total", "Seat releases run after a failed booking insert", ["outcome"]
)

# Seat reservation metrics
SEAT_RESERVE_LATENCY = Histogram("busbooking_seat_reserve_latency_seconds", "Latency for seat reservation operations")
SEAT_RESERVE_RESULTS = Counter("busbooking_seat_reserve_total", "Seat reservation outcomes", ["result"])
