from sizeguide.services.translations import CN_TO_EN, translate_chinese


def test_translates_known_terms():
    assert translate_chinese("胸围 100") == "Chest 100"
    assert translate_chinese("尺码 S M L") == "Size S M L"


def test_longest_term_wins():
    assert translate_chinese("大腿围 60") == "Thigh 60"
    assert translate_chinese("裤长 100") == "Pants Length 100"


def test_inserts_space_before_digits():
    assert translate_chinese("胸围100") == "Chest 100"


def test_english_and_empty_pass_through():
    assert translate_chinese("Chest 100") == "Chest 100"
    assert translate_chinese("") == ""
    assert translate_chinese(None) == ""


def test_dictionary_covers_chart_headers():
    for term in ("尺码", "衣长", "胸围", "肩宽", "袖长", "腰围", "臀围", "裤长"):
        assert term in CN_TO_EN
