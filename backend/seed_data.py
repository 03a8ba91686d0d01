"""
Default project collection written to storage on first run.

Nine manufacturer partnerships; p1-p3 carry monthly history, p4-p9 start empty.
Consumers must deep-copy before mutating (storage.ProjectStorage does).
"""

SEED_PROJECTS = [
    {
        "id": "p1",
        "name": "心血管-立普妥专项推广",
        "manufacturer": "辉瑞制药 (Pfizer)",
        "products": "阿托伐他汀钙片 (立普妥), 络活喜",
        "start_date": "2023-01-01",
        "status": "Active",
        "description": "针对核心城市三甲医院的心血管产品线深度分销与学术推广协助。",
        "monthly_data": [
            {"month": "2023-08", "actual_sales": 120000, "target_sales": 110000,
             "hospital_coverage": 45, "activities": "北京KOL学术研讨会"},
            {"month": "2023-09", "actual_sales": 115000, "target_sales": 115000,
             "hospital_coverage": 48, "activities": "区域销售代表培训"},
            {"month": "2023-10", "actual_sales": 130000, "target_sales": 120000,
             "hospital_coverage": 50, "activities": "新增2家三甲医院进药"},
        ],
    },
    {
        "id": "p2",
        "name": "神经科-新药上市项目",
        "manufacturer": "诺华制药 (Novartis)",
        "products": "依瑞奈尤单抗, 芬戈莫德",
        "start_date": "2023-03-15",
        "status": "Active",
        "description": "协助神经内科新特药的市场准入与早期患者主要渠道铺货。",
        "monthly_data": [
            {"month": "2023-08", "actual_sales": 50000, "target_sales": 60000,
             "hospital_coverage": 12, "activities": "新药上市发布会"},
            {"month": "2023-09", "actual_sales": 58000, "target_sales": 65000,
             "hospital_coverage": 15, "activities": "各省招标挂网跟进"},
            {"month": "2023-10", "actual_sales": 70000, "target_sales": 70000,
             "hospital_coverage": 20, "activities": "城市学术沙龙"},
        ],
    },
    {
        "id": "p3",
        "name": "肿瘤-生物制剂DTP项目",
        "manufacturer": "罗氏制药 (Roche)",
        "products": "利妥昔单抗, 贝伐珠单抗",
        "start_date": "2022-11-01",
        "status": "Active",
        "description": "肿瘤生物制剂的DTP药房专项配送与患者管理服务。",
        "monthly_data": [
            {"month": "2023-09", "actual_sales": 450000, "target_sales": 400000,
             "hospital_coverage": 80, "activities": "全国肿瘤年会展台支持"},
            {"month": "2023-10", "actual_sales": 460000, "target_sales": 420000,
             "hospital_coverage": 82, "activities": "患者援助项目(PAP)优化"},
        ],
    },
    {
        "id": "p4",
        "name": "糖尿病-基层市场扩面",
        "manufacturer": "赛诺菲 (Sanofi)",
        "products": "甘精胰岛素, 二甲双胍缓释片",
        "start_date": "2023-02-01",
        "status": "Active",
        "description": "针对二三线城市及县域市场的广覆盖推广计划。",
        "monthly_data": [],
    },
    {
        "id": "p5",
        "name": "呼吸科-OTC连锁合作",
        "manufacturer": "葛兰素史克 (GSK)",
        "products": "辅舒良, 舒利迭",
        "start_date": "2023-06-01",
        "status": "Pending",
        "description": "与大型连锁药店建立战略合作，提升呼吸类产品OTC份额。",
        "monthly_data": [],
    },
    {
        "id": "p6",
        "name": "皮肤科-特药专家维护",
        "manufacturer": "强生 (J&J)",
        "products": "乌司奴单抗, 润肤剂系列",
        "start_date": "2023-01-20",
        "status": "Active",
        "description": "皮肤科专家学术网络建设与维护。",
        "monthly_data": [],
    },
    {
        "id": "p7",
        "name": "消化科-针剂院内配送",
        "manufacturer": "武田制药 (Takeda)",
        "products": "泮托拉唑针剂, 维得利珠单抗",
        "start_date": "2023-04-10",
        "status": "Active",
        "description": "医院静脉输液产品的供应链优化与库存管理。",
        "monthly_data": [],
    },
    {
        "id": "p8",
        "name": "免疫-疫苗冷链物流",
        "manufacturer": "艾伯维 (AbbVie)",
        "products": "修美乐, 瑞福",
        "start_date": "2023-05-05",
        "status": "Active",
        "description": "生物制剂与疫苗的冷链物流保障项目。",
        "monthly_data": [],
    },
    {
        "id": "p9",
        "name": "骨科-高值耗材集采",
        "manufacturer": "史赛克 (Stryker)",
        "products": "膝关节假体, 骨水泥",
        "start_date": "2023-07-01",
        "status": "Active",
        "description": "应对国家高值医用耗材集中采购的配送服务落地。",
        "monthly_data": [],
    },
]
