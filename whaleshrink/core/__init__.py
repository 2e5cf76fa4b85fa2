"""WhaleShrink 核心层: 异常定义与领域类型."""
