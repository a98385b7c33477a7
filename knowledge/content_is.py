"""
Icelandic knowledge base for Sky Lagoon.

Sections missing here are served from the English content.
"""

CONTENT = {
    "website_links": {
        "main": "https://www.skylagoon.com/is",
        "booking": "https://www.skylagoon.com/is/boka",
        "packages": "https://www.skylagoon.com/is/leidir-til-ad-njota",
        "gift_tickets": "https://www.skylagoon.com/is/gjafakort",
    },
    "opening_hours": {
        "summer": {
            "period": "1. júní - 30. september",
            "hours": "09:00 - 23:00 alla daga",
        },
        "autumn": {
            "period": "1. október - 31. október",
            "hours": "10:00 - 23:00 alla daga",
        },
        "winter": {
            "period": "1. nóvember - 31. maí",
            "weekdays": "Mánudaga - föstudaga: 11:00 - 22:00",
            "weekends": "Laugardaga - sunnudaga: 10:00 - 22:00",
        },
        "closing_notes": [
            "Lónið lokar 30 mínútum fyrir lokun",
            "Skjól ritúalið og Gelmir bar loka klukkustund fyrir lokun",
        ],
    },
    "packages": {
        "saman": {
            "name": "Saman",
            "description": "Aðgangur að lóninu, ein ferð í gegnum Skjól ritúalið og almenn búningsaðstaða.",
            "pricing": {
                "weekday": "12.990 kr. (mánudaga - fimmtudaga)",
                "weekend": "14.990 kr. (föstudaga - sunnudaga)",
                "youth": "6.495 kr. virka daga, 7.495 kr. um helgar (12-14 ára)",
            },
        },
        "ser": {
            "name": "Sér",
            "description": "Aðgangur að lóninu, Skjól ritúalið og sérklefi með Sky Lagoon húðvörum.",
            "pricing": {
                "weekday": "15.990 kr. (mánudaga - fimmtudaga)",
                "weekend": "17.990 kr. (föstudaga - sunnudaga)",
                "youth": "7.995 kr. virka daga, 8.995 kr. um helgar (12-14 ára)",
            },
        },
        "date_night": {
            "name": "Stefnumót",
            "description": "Aðgangur og ritúal fyrir tvo, drykkur á Gelmi bar og Sky sælkeraplatti á Smakk bar.",
        },
        "differences": {
            "changing_facilities": "Saman er með almenna búningsklefa; Sér er með sérklefa.",
            "ritual": "Báðir pakkar innihalda eina ferð í gegnum Skjól ritúalið.",
        },
    },
    "gift_tickets": {
        "description": "Gjafakort eru send í tölvupósti og má prenta út eða sýna í síma.",
        "validity": "Gjafakort gilda í 4 ár frá kaupdegi.",
        "redeeming": "Bókaðu tíma á vefnum og sláðu inn kóðann við greiðslu.",
    },
    "booking_modifications": {
        "policy": "Hægt er að breyta bókun fyrir 1-9 gesti með 24 klukkustunda fyrirvara.",
        "methods": {
            "phone": "Hringdu í 527 6800 (09:00 - 18:00)",
            "email": "Sendu póst á reservations@skylagoon.is með bókunarnúmeri",
        },
    },
    "weather_policy": {
        "rebooking": "Gestir geta breytt bókun allt að 24 klukkustundum fyrir bókaðan tíma.",
    },
    "ritual": {
        "description": "Skjól ritúalið er sjö skrefa ferðalag um íslenska baðmenningu.",
        "included": "Innifalið í öllum pökkum.",
        "steps": [
            "1. Laug: heitt lón, 38-40°C",
            "2. Kuldi: kaldur pottur, 5°C",
            "3. Ylur: sána með sjávarútsýni, 80-90°C",
            "4. Súld: köld þoka",
            "5. Mýkt: Sky saltskrúbbur",
            "6. Gufa: gufubað",
            "7. Hreinsun: sturta",
        ],
    },
    "dining": {
        "smakk_bar": {
            "description": "Íslenskir sælkeraplattar eftir heimsóknina.",
        },
        "keimur_cafe": {
            "description": "Kaffihús með léttum réttum og kaffi.",
        },
        "gelmir_bar": {
            "description": "Bar í lóninu. Hámark þrír áfengir drykkir á gest.",
        },
    },
    "policies": {
        "late_arrival": {
            "grace_period": "30 mínútur",
            "within_grace": "Gestir sem koma innan 30 mínútna frá bókuðum tíma geta farið beint í afgreiðslu.",
            "beyond_grace": "Seinni komur eru háðar framboði; við mælum með að breyta bókunartíma.",
            "contact": "Hringdu í 527 6800 eða sendu póst á reservations@skylagoon.is",
        },
        "cancellation": {
            "individual": "Breytingar eða endurgreiðsla með 24 klukkustunda fyrirvara fyrir 1-9 gesti.",
            "groups": "Hópar 10 gesta eða fleiri þurfa 72 klukkustunda fyrirvara.",
        },
    },
    "facilities": {
        "changing_rooms": {
            "public": "Saman: almennir búningsklefar með sturtum og skápum.",
            "private": "Sér: sérklefi með sturtu og húðvörum.",
        },
        "accessibility": "Lónið, ritúalið og búningsklefar eru aðgengileg hjólastólum.",
    },
    "transportation": {
        "location": "Vesturvör 44-48, 200 Kópavogi.",
        "shuttle": "Reykjavík Excursions ekur frá BSÍ á klukkutíma fresti.",
        "public_bus": "Strætó leiðir 4 og 35 stoppa nálægt Sky Lagoon (Hamraborg).",
        "parking": "Ókeypis bílastæði á staðnum.",
    },
    "age_policy": {
        "minimum_age": "12 ár; börn sem verða 12 ára á almanaksárinu mega koma.",
        "supervision": "Gestir 12-14 ára verða að vera í fylgd forráðamanns 18 ára eða eldri.",
    },
}
