import re
from typing import Dict, List, Tuple


# Chinese clothing / size-chart vocabulary -> English
CN_TO_EN: Dict[str, str] = {
    # Size chart headers
    "尺码": "Size",
    "尺寸": "Size",
    "码数": "Size",
    "号码": "Size",
    "码": "Size",
    "均码": "One Size",

    # Length
    "衣长": "Length",
    "全长": "Total Length",
    "身长": "Body Length",
    "前长": "Front Length",
    "后长": "Back Length",
    "后中长": "Back Length",

    # Upper body
    "胸围": "Chest",
    "胸園": "Chest",  # OCR misread
    "胸宽": "Chest Width",
    "半胸围": "Chest Width",
    "肩宽": "Shoulder",
    "肩寬": "Shoulder",
    "袖长": "Sleeve",
    "袖長": "Sleeve",
    "抽长": "Sleeve",  # OCR misread of 袖长
    "袖口": "Cuff",
    "领宽": "Collar Width",
    "领高": "Collar Height",
    "帽高": "Hood Height",
    "帽宽": "Hood Width",

    # Lower body
    "腰围": "Waist",
    "腰圍": "Waist",
    "臀围": "Hip",
    "臀圍": "Hip",
    "裤长": "Pants Length",
    "褲長": "Pants Length",
    "裙长": "Skirt Length",
    "下摆": "Hem",
    "裤脚": "Leg Opening",
    "脚口": "Leg Opening",
    "大腿围": "Thigh",
    "腿围": "Thigh",
    "前裆": "Front Rise",
    "后裆": "Back Rise",
    "内长": "Inseam",
    "坐围": "Hip Width",

    # Units
    "厘米": "cm",
    "公分": "cm",
    "英寸": "inch",

    # Recommendations
    "推荐尺码": "Recommended Size",
    "推荐体重": "Recommended Weight",
    "推荐身高": "Recommended Height",
    "适合体重": "Suitable Weight",
    "适合身高": "Suitable Height",
    "建议体重": "Suggested Weight",
    "建议身高": "Suggested Height",
    "参考体重": "Reference Weight",
    "参考身高": "Reference Height",

    # Weight units
    "公斤": "kg",
    "斤": "jin",

    # Fit descriptions
    "宽松": "Loose Fit",
    "修身": "Slim Fit",
    "常规": "Regular Fit",
    "紧身": "Tight Fit",

    # Materials
    "棉": "Cotton",
    "聚酯纤维": "Polyester",
    "涤纶": "Polyester",
    "尼龙": "Nylon",
    "羊毛": "Wool",
    "羊绒": "Cashmere",
    "真丝": "Silk",
    "皮革": "Leather",
    "鹅绒": "Goose Down",
    "鸭绒": "Duck Down",
    "充绒量": "Down Fill",

    # Colors
    "黑色": "Black",
    "白色": "White",
    "灰色": "Gray",
    "红色": "Red",
    "蓝色": "Blue",
    "绿色": "Green",
    "黄色": "Yellow",
    "棕色": "Brown",
    "卡其": "Khaki",
    "米色": "Beige",
    "藏青": "Navy",
    "军绿": "Army Green",
    "酒红": "Burgundy",

    # Other
    "重量": "Weight",
    "克": "g",
    "男": "Men",
    "女": "Women",
    "中性": "Unisex",
    "单位": "Unit",
    "图片": "Picture",
}

# Longest terms first so "大腿围" is replaced before "腿围"
_SORTED_TERMS: List[Tuple[re.Pattern, str]] = [
    (re.compile(re.escape(cn)), en)
    for cn, en in sorted(CN_TO_EN.items(), key=lambda item: len(item[0]), reverse=True)
]


def _replacement(english: str):
    def _sub(match: re.Match) -> str:
        text = match.string
        start, end = match.span()
        left = " " if start > 0 and text[start - 1].isalnum() else ""
        right = " " if end < len(text) and text[end].isalnum() else ""
        return f"{left}{english}{right}"
    return _sub


def translate_chinese(text: str | None) -> str:
    """Replace every known Chinese term with its English equivalent.

    Replacement is context-free. A space is added where the English word would
    otherwise run into a neighbouring letter or digit ("胸围100" -> "Chest 100").
    """
    if not text:
        return text or ""
    result = text
    for pattern, english in _SORTED_TERMS:
        if pattern.search(result):
            result = pattern.sub(_replacement(english), result)
    return result
