#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Prompt builders for every pipeline stage.

All builders are pure: configuration in, instruction text out.

    1. System prompt    - writing methodology, sent as the system message
    2. Generate prompt  - article from source material
    3. Content review   - first pass: facts, logic, structure
    4. Style review     - second pass: remove machine-sounding phrasing
    5. Detail review    - third pass: punctuation, spacing, rhythm
    6. Revise prompt    - rewrite by one free-text instruction
"""

from typing import Dict

from core.models import ArticleType, Audience, ReviewStep, WritingConfig, WritingStyle


# Section titles that introduce the material in the user message
SOURCE_SECTION_TITLE = "素材内容"
REVIEW_SECTION_TITLE = "需要审校的文章"
REVISE_SECTION_TITLE = "Current Article"


ARTICLE_TYPE_LABELS: Dict[ArticleType, str] = {
    ArticleType.WECHAT: "微信公众号文章",
    ArticleType.BLOG: "博客文章",
    ArticleType.NEWSLETTER: "Newsletter / 邮件通讯",
    ArticleType.TUTORIAL: "教程 / 操作指南",
}

AUDIENCE_LABELS: Dict[Audience, str] = {
    Audience.TECH: "技术从业者（开发者、工程师）",
    Audience.PM: "产品经理和设计师",
    Audience.STARTUP: "创业者和商业人士",
    Audience.GENERAL: "泛互联网读者",
}

STYLE_DESCRIPTIONS: Dict[WritingStyle, str] = {
    WritingStyle.CASUAL: (
        "轻松随意，像朋友聊天。多用「我」开头，多加感叹和吐槽。"
        "语气词可以多一点：吧、呢、嘛、啊。可以适当用一些网络用语，但不要太过。"
    ),
    WritingStyle.PROFESSIONAL: (
        "专业但不端着。该严肃的地方严肃，但整体还是说人话。少用术语堆砌，"
        "复杂概念要用大白话解释清楚。保持「懂行的朋友在分享经验」的感觉。"
    ),
    WritingStyle.HUMOROUS: (
        "幽默风趣，善于用类比和比喻。可以自嘲，可以吐槽，但不要硬凑段子。"
        "幽默感要自然流露，不要每句都试图搞笑。关键信息还是要讲清楚。"
    ),
}

ARTICLE_TYPE_STRUCTURE: Dict[ArticleType, str] = {
    ArticleType.WECHAT: """### 微信公众号文章结构要求
- 标题要有吸引力，但不要标题党。可以用数字、疑问、反常识
- 开头 2-3 句话必须抓住读者，可以用一个故事、一个问题、或一个反直觉的观点
- 正文分 3-5 个小节，每节有小标题
- 小标题要有信息量，不要用「第一步」「第二步」这种空洞标题
- 结尾不要喊口号，可以做个简短的总结或者抛出一个开放性问题
- 全文适合手机阅读：短段落、短句子、多留白""",

    ArticleType.BLOG: """### 博客文章结构要求
- 标题清晰直接，让读者知道能学到什么
- 开头说清楚这篇文章要解决什么问题
- 正文可以更深入，允许较长的分析段落
- 可以包含代码片段、配置示例等技术细节
- 用小标题和列表帮助读者快速定位
- 结尾可以有「下一步」建议或相关资源链接""",

    ArticleType.NEWSLETTER: """### Newsletter 结构要求
- 用对话式的语气，像写信一样
- 开头可以聊聊最近的见闻或感想，自然引出主题
- 内容精炼，一个 newsletter 聚焦 1-3 个核心观点
- 每个观点用 2-3 段讲清楚
- 可以穿插个人经历和思考
- 结尾可以预告下期内容或邀请读者互动""",

    ArticleType.TUTORIAL: """### 教程结构要求
- 标题明确：「如何 XX」或「XX 入门指南」
- 开头说清楚：读完能学会什么、需要什么前置知识、大概要花多长时间
- 步骤清晰，用数字编号
- 每个步骤要有：做什么、为什么这样做、可能踩的坑
- 重要警告和常见错误单独标出
- 结尾给一个完整的总结清单或 checklist""",
}

AUDIENCE_GUIDANCE: Dict[Audience, str] = {
    Audience.TECH: """- 可以使用技术术语，但首次出现时简单解释
- 技术细节要准确，不确定的地方坦诚说明
- 可以聊聊实际开发中的踩坑经验
- 代码示例要可运行、有注释
- 不要居高临下地「科普」，假设读者有基础""",

    Audience.PM: """- 少用技术术语，多用业务语言
- 关注「为什么」比「怎么做」更重要
- 多用真实产品案例来解释概念
- 可以聊聊需求沟通、团队协作中的真实场景
- 数据和指标用读者能理解的方式呈现""",

    Audience.STARTUP: """- 关注商业价值和实际回报
- 案例要有具体的数字和结果（仅使用素材提供的）
- 避免空泛的「赋能」「生态」等词
- 务实导向，少讲概念多讲方法
- 考虑资源有限的现实情况""",

    Audience.GENERAL: """- 所有专业概念都要用大白话解释
- 多用类比和生活化的例子
- 不要假设读者有任何专业背景
- 保持轻松有趣的语气
- 重点讲「这跟我有什么关系」""",
}

# Phrases the style pass hunts down; also listed in the system prompt
BANNED_PHRASES = (
    "值得注意的是", "总而言之", "综上所述", "不可否认", "众所周知",
    "在当今时代", "随着……的发展", "让我们一起", "深入探讨", "赋能",
    "不仅……而且……", "首先……其次……最后", "毋庸置疑", "至关重要",
)


def get_system_prompt() -> str:
    banned = "、".join(f"「{p}」" for p in BANNED_PHRASES)
    return f"""你是一位经验丰富的中文写作者，擅长 Vibe Writing：用真人说话的方式写文章。

## Vibe Writing 方法论

1. 说人话
- 像给朋友讲一件你真正关心的事，不要像在写报告。
- 每句话尽量控制在 30 字以内，一句只讲一件事。
- 多用短段落，一段 2-3 句就换行。

2. 有观点、有温度
- 敢下判断，表达自己的看法和感受。
- 适当使用「我」的视角，讲亲身体会。
- 承认不确定的地方，不装懂。

3. 具体胜过抽象
- 用例子、场景、数字说话，少用空洞的形容词。
- 只使用素材里提供的事实和数据，绝不编造。

4. 去掉 AI 味
- 禁止使用这些词句：{banned}。
- 不要机械的排比和对仗，不要每段都用总结句收尾。
- 不要在结尾喊口号。

5. 排版规范
- 输出 Markdown，标题用 #，小标题用 ##。
- 中英文、中文与数字之间加空格。
- 中文引号使用「」。"""


def get_generate_prompt(config: WritingConfig) -> str:
    type_label = ARTICLE_TYPE_LABELS[config.article_type]
    audience_label = AUDIENCE_LABELS[config.audience]
    style_desc = STYLE_DESCRIPTIONS[config.style]
    structure_guide = ARTICLE_TYPE_STRUCTURE[config.article_type]
    guidance = AUDIENCE_GUIDANCE[config.audience]

    extra = config.extra_instructions.strip()
    extra_block = f"\n## 额外要求\n\n{extra}\n" if extra else ""

    return f"""## 任务

根据用户提供的素材，写一篇高质量的{type_label}。

## 写作流程

请严格按以下三个阶段执行：

### 阶段一：素材分析

先仔细阅读用户提供的所有素材（可能是笔记、大纲、参考文章、关键词等），提取：
- 核心主题和关键论点
- 可以直接使用的事实、数据、案例（仅使用素材中提供的，不要编造）
- 素材中的独特观点或有趣角度
- 素材中缺失但需要补充的内容（用你的知识补充，但标注「这是我的理解」）

### 阶段二：拟定大纲

基于素材分析，在脑中构建文章大纲：
- 确定文章的核心论点（一句话能说清楚的那种）
- 规划 3-5 个主要段落的核心内容
- 确定开头的钩子（用什么方式抓住读者）
- 确定结尾的落点（留下什么印象）

### 阶段三：写作输出

按照大纲写出完整文章，全程遵守系统提示中的 Vibe Writing 方法论。

## 文章参数

- **文章类型**：{type_label}
- **目标读者**：{audience_label}
- **字数要求**：{config.word_count} 字
- **写作风格**：{style_desc}

{structure_guide}

## 写作风格细化

针对目标读者（{audience_label}），注意：
{guidance}
{extra_block}
## 输出要求

1. 直接输出 Markdown 格式的文章正文
2. 不要输出素材分析过程和大纲（在内部完成即可）
3. 不要在文章前后加任何解释性文字
4. 文章必须包含标题（用 # 一级标题）
5. 字数要在 {config.word_count} 字范围内

## 最终检查

输出前，在内部确认以下几点：
- [ ] 没有使用任何 AI 味词汇（检查系统提示中的禁用列表）
- [ ] 所有句子都在 30 字以内
- [ ] 有至少 5 处个人观点或情感表达
- [ ] 没有编造任何数据或案例
- [ ] 中英文之间有空格
- [ ] 使用了「」引号而不是 \"\"
- [ ] 段落短小，适合手机阅读"""


def get_content_review_prompt() -> str:
    return """## 任务：内容审校（第一轮）

你是严谨的内容编辑。请对用户提供的文章做“内容层面”的修订，重点处理以下问题：

1. 事实与表述准确性
- 删除或改写明显无法验证、疑似编造、或过于绝对化的说法。
- 技术、产品、流程描述要前后自洽，不要出现自相矛盾。

2. 逻辑一致性
- 修复论证跳跃、因果不清、结论与论据不匹配的问题。
- 若某段结论依据不足，请补上必要过渡或降低断言强度。

3. 结构完整性
- 保留原文核心主题与主要结构。
- 删除重复段落和空话，补足必要的衔接句。
- 确保开头有切入点、结尾有收束。

4. 信息密度
- 每段都应提供有效信息或明确观点。
- 将泛泛而谈改成更具体、可理解的表达。

## 关键约束
- 只做内容层面的修订，不做“风格人格化”处理（那是下一轮的任务）。
- 不要输出审校报告、问题清单、解释或备注。
- 不要添加“以下是修改后内容”等引导语。

## 输出要求
- 直接输出修订后的完整文章。
- 使用 Markdown 格式。
- 保留原文语言（中文内容继续用中文）。"""


def get_style_review_prompt() -> str:
    banned = "、".join(f"「{p}」" for p in BANNED_PHRASES)
    return f"""## 任务：风格审校（第二轮，最关键）

内容已经在上一轮定稿。这一轮只处理“读起来像不像真人写的”。

1. 清除 AI 味表达
- 删除或改写这些词句：{banned}。
- 打散机械的排比、对仗和“三段式”罗列。
- 去掉每段结尾的总结句和升华句。

2. 加入人的温度
- 适当补充第一人称的感受和判断，但不要编造经历。
- 把书面语换成口语，把长句拆成短句。
- 语气要自然，允许有一点情绪。

3. 控制节奏
- 句子长短交错，不要每句一样长。
- 段落保持短小，适合手机阅读。

## 关键约束
- 不改变事实、数据和核心观点。
- 不增删小节，不调整结构。
- 不要输出修改说明或对比。

## 输出要求
- 直接输出修订后的完整文章。
- 使用 Markdown 格式。"""


def get_detail_review_prompt() -> str:
    return """## 任务：细节审校（第三轮）

这是发布前的最后一轮，只做细节打磨，不动内容和风格。

1. 标点
- 中文语境使用全角标点，引号统一为「」。
- 去掉多余的感叹号和省略号。

2. 空格
- 中英文之间、中文与数字之间加一个空格。
- 删除多余空格和空行。

3. 节奏与排版
- 超过 30 字的句子拆短。
- 过长的段落拆开，每段 2-3 句。
- 标题层级正确，标题单独成行，标题不要过长。

4. 错别字与用词
- 修正错别字、重复字和不通顺的搭配。

## 关键约束
- 不改变内容、观点和整体语气。
- 不要输出修改说明。

## 输出要求
- 直接输出修订后的完整文章。
- 使用 Markdown 格式。"""


_REVIEW_BUILDERS = {
    ReviewStep.CONTENT: get_content_review_prompt,
    ReviewStep.STYLE: get_style_review_prompt,
    ReviewStep.DETAIL: get_detail_review_prompt,
}


def get_review_prompt(step: ReviewStep) -> str:
    return _REVIEW_BUILDERS[ReviewStep(step)]()


def get_revise_prompt(instruction: str) -> str:
    return f"""## Task: Revise the Article Using the New Instruction
You will receive an article and one new revision instruction. Rewrite the article directly based on the instruction and output the full updated version.

### Revision Instruction
{instruction}

### Requirements
1. Apply the instruction faithfully and do not skip key points.
2. Keep the original core meaning and structure unless the instruction asks for major rewrite.
3. Keep Markdown format.
4. Do not output explanations, notes, comparisons, or lead-in text.
5. Output only the fully revised article content."""


def compose_user_message(prompt: str, section_title: str, material: str) -> str:
    """Stage prompt, separator, then the material under its own heading"""
    return f"{prompt}\n\n---\n\n## {section_title}\n\n{material}"
