"""
English knowledge base for Sky Lagoon.

Nested, read-only content addressed by dotted section references
(e.g. "policies.late_arrival").
"""

CONTENT = {
    "website_links": {
        "main": "https://www.skylagoon.com",
        "booking": "https://www.skylagoon.com/booking/",
        "packages": "https://www.skylagoon.com/packages/",
        "ritual": "https://www.skylagoon.com/experience/skjol-ritual/",
        "dining": "https://www.skylagoon.com/food-drink/",
        "transportation": "https://www.skylagoon.com/getting-here",
        "gift_tickets": "https://www.skylagoon.com/buy-gift-tickets/",
        "multi_pass": "https://www.skylagoon.com/multi-pass/",
    },
    "opening_hours": {
        "summer": {
            "period": "June 1 - September 30",
            "hours": "09:00 - 23:00 (GMT) daily",
        },
        "autumn": {
            "period": "October 1 - October 31",
            "hours": "10:00 - 23:00 (GMT) daily",
        },
        "winter": {
            "period": "November 1 - May 31",
            "weekdays": "Monday - Friday: 11:00 - 22:00 (GMT)",
            "weekends": "Saturday - Sunday: 10:00 - 22:00 (GMT)",
        },
        "closing_notes": [
            "The lagoon closes 30 minutes before closing time",
            "The Skjól ritual and Gelmir Bar close 1 hour before closing time",
        ],
    },
    "packages": {
        "saman": {
            "name": "Saman Package",
            "description": "Our classic package: lagoon admission, one journey through the Skjól ritual and public changing facilities.",
            "includes": [
                "Sky Lagoon admission",
                "Skjól ritual access",
                "Public changing facilities",
                "Towels included",
            ],
            "pricing": {
                "weekday": "12,990 ISK (Monday - Thursday)",
                "weekend": "14,990 ISK (Friday - Sunday)",
                "youth": "6,495 ISK weekdays, 7,495 ISK weekends (ages 12-14)",
            },
        },
        "ser": {
            "name": "Sér Package",
            "description": "Our premium package with private changing facilities and Sky Lagoon skincare products.",
            "includes": [
                "Sky Lagoon admission",
                "One journey through the Skjól ritual",
                "Private changing facilities with Sky Body Lotion",
                "Towels included",
            ],
            "pricing": {
                "weekday": "15,990 ISK (Monday - Thursday)",
                "weekend": "17,990 ISK (Friday - Sunday)",
                "youth": "7,995 ISK weekdays, 8,995 ISK weekends (ages 12-14)",
            },
        },
        "date_night": {
            "name": "Sky Lagoon for Two",
            "description": "Admission and ritual for two guests, a drink each at Gelmir Bar and the Sky Platter at Smakk Bar.",
            "pricing": {
                "saman_for_two": "from 33,480 ISK",
                "ser_for_two": "from 39,480 ISK",
            },
            "availability": "Check-in no later than 18:00",
        },
        "differences": {
            "changing_facilities": "Saman uses public changing rooms; Sér has private changing rooms.",
            "amenities": "Sér includes Sky Lagoon skincare products in the changing room.",
            "ritual": "Both packages include one journey through the Skjól ritual.",
        },
    },
    "gift_tickets": {
        "description": "Gift tickets are sent by email and can be printed or shown on a phone.",
        "options": ["Saman Gift Ticket", "Sér Gift Ticket", "Sky Lagoon for Two Gift Ticket"],
        "validity": "Gift tickets are valid for 4 years from the date of purchase.",
        "redeeming": "Book a time on the website and enter the gift ticket code at checkout.",
        "link": "https://www.skylagoon.com/buy-gift-tickets/",
    },
    "booking_modifications": {
        "policy": "Individual bookings (1-9 guests) can be changed with 24 hours notice.",
        "methods": {
            "phone": "Call +354 527 6800 (09:00 - 18:00 GMT), best for same-day changes",
            "email": "Email reservations@skylagoon.is with your booking reference",
        },
        "requirements": [
            "Your booking reference number",
            "Whether you want to change the date or request a refund",
        ],
    },
    "weather_policy": {
        "rebooking": "Guests may rebook up to 24 hours before their scheduled time by emailing reservations@skylagoon.is.",
        "recommendations": "We stay open in most weather. Bring a hat if you want to enjoy the lagoon in true Icelandic weather.",
    },
    "ritual": {
        "description": "The Skjól ritual is a seven-step journey through Icelandic bathing culture.",
        "included": "Included in every package; it cannot be booked separately or excluded.",
        "steps": [
            "1. Laug: warm lagoon, 38-40°C",
            "2. Kuldi: cold plunge, 5°C",
            "3. Ylur: sauna with ocean view, 80-90°C",
            "4. Súld: cold mist",
            "5. Mýkt: Sky Body Scrub",
            "6. Gufa: steam room",
            "7. Hreinsun: shower to finish",
        ],
        "duration": "Most guests spend 45 minutes to an hour on the ritual.",
    },
    "seasonal_information": {
        "winter": "Shorter daylight hours; the northern lights may be visible on clear evenings.",
        "summer": "Long bright evenings and the midnight sun around the solstice.",
        "holidays": "Opening hours differ on Christmas Eve, Christmas Day, New Year's Eve and New Year's Day.",
    },
    "dining": {
        "smakk_bar": {
            "description": "Icelandic tasting platters served after your visit.",
            "hours": "12:00 until 30 minutes before closing",
        },
        "keimur_cafe": {
            "description": "Café with light bites, pastries and coffee.",
            "hours": "From opening until 30 minutes before closing",
        },
        "gelmir_bar": {
            "description": "In-water bar serving drinks in the lagoon.",
            "policy": "Maximum of three alcoholic drinks per guest; wristband payment.",
        },
        "dietary": "Vegan and gluten-free options are available at Smakk Bar and Keimur Café.",
    },
    "policies": {
        "late_arrival": {
            "grace_period": "30 minutes",
            "within_grace": "Arrivals within 30 minutes of the booked time can proceed directly to reception.",
            "beyond_grace": "Later arrivals are subject to availability; we recommend changing the booking time.",
            "contact": "Call +354 527 6800 (09:00 - 18:00 GMT) or email reservations@skylagoon.is",
        },
        "cancellation": {
            "individual": "Free changes or refunds with 24 hours notice for 1-9 guests.",
            "groups": "Groups of 10 or more need 72 hours notice.",
        },
        "swimwear": "Swimwear is required; it can be rented at reception.",
        "phones": "Waterproof phone cases are sold at reception; please respect other guests' privacy.",
        "payment": "Payment in the lagoon is made with your wristband and settled on departure.",
    },
    "facilities": {
        "changing_rooms": {
            "public": "Saman: public changing rooms with showers, hair dryers and lockers.",
            "private": "Sér: private changing rooms with personal shower and skincare products.",
        },
        "accessibility": "The lagoon, ritual and changing rooms are wheelchair accessible; a lift chair is available.",
        "towels": "Towels are included in all packages.",
        "lockers": "Every guest receives a locker operated by the wristband.",
    },
    "transportation": {
        "location": "Vesturvör 44-48, 200 Kópavogur, 7 km from Reykjavík city centre.",
        "shuttle": {
            "operator": "Reykjavík Excursions",
            "from_bsi": "Departures from BSÍ bus terminal every hour from 11:00 to 20:00",
            "hotel_pickup": "Hotel pick-up is available and starts 30 minutes before departure from BSÍ.",
        },
        "public_bus": "Strætó buses 4 and 35 stop near Sky Lagoon (Hamraborg).",
        "parking": "Free parking is available on site.",
        "airport": "Keflavík International Airport is about 45 minutes away by car.",
    },
    "group_bookings": {
        "size": "Groups are 10 guests or more.",
        "contact": "Email reservations@skylagoon.is for group offers.",
        "corporate": "Corporate packages and private events are available on request.",
    },
    "multi_pass": {
        "description": "Six visits to Sky Lagoon for one guest, valid for 4 months.",
        "options": ["Hefð Multi-Pass (Sér)", "Venja Multi-Pass (Saman)"],
        "rules": "The pass holder must present photo ID; each visit must be booked in advance.",
    },
    "products": {
        "sky_body_scrub": "The Sky Body Scrub used in the ritual, available in 30 ml and 200 ml.",
        "sky_body_lotion": "Sky Body Lotion from our private changing rooms.",
        "where_to_buy": "Products are sold at reception and in our online shop.",
    },
    "age_policy": {
        "minimum_age": "12 years; children turning 12 within the calendar year may visit.",
        "supervision": "Guests aged 12-14 must be accompanied by a guardian aged 18 or older.",
        "id": "Valid ID may be requested to confirm a child's date of birth.",
        "reason": "The experience is designed for adults to relax, and alcohol is served in the lagoon.",
    },
}
