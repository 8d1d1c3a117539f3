"""终端交互层：增量渲染（renderer）、行输入（line_reader）、状态指示（spinner）。"""
