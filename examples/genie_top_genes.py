#!/usr/bin/env python

##### Builds a binary matrix for all samples of a GENIE release and writes #####
##### the frequently altered genes for each cancer type.                   #####

import os

from tqdm.auto import tqdm

import genebinary

################################################################################
# Setup
################################################################################

# Where to find the GENIE data
genie_dir = os.path.join(os.environ.get("HOME"), "genie/Data/Original/genie-15.0/")
out_dir = "genie_top_genes"
os.makedirs(out_dir, exist_ok=True)

# Only genes altered in at least 5% of tested samples of a cancer type
threshold = 0.05

# Gene panels are read from the gene_panels directory of the release
config = genebinary.Configuration(genie_dir)
reference = genebinary.Reference.load(config)

################################################################################
# Load GENIE data and convert to canonical column names
################################################################################

print("Loading samples", end=" ... ", flush=True)
samples = genebinary.load_file(os.path.join(genie_dir, "data_clinical_sample.txt"))
print("done.", flush=True)

print("Loading mutations", end=" ... ", flush=True)
mutations = genebinary.load_file(
    os.path.join(genie_dir, "data_mutations_extended.txt")
).rename(
    columns={
        "Tumor_Sample_Barcode": "sample_id",
        "Hugo_Symbol": "hugo_symbol",
        "Variant_Type": "variant_type",
        "Variant_Classification": "variant_classification",
        "Mutation_Status": "mutation_status",
    }
)
print("done.", flush=True)

print("Loading structural variants", end=" ... ", flush=True)
fusions = (
    genebinary.load_file(os.path.join(genie_dir, "data_sv.txt"))
    .rename(columns={"Sample_Id": "sample_id", "Site1_Hugo_Symbol": "hugo_symbol"})
    .loc[:, ["sample_id", "hugo_symbol"]]
)
print("done.", flush=True)

print("Loading copy number data", end=" ... ", flush=True)
# GENIE copy number data is a gene vs sample matrix with values -2 ... 2
cna = (
    genebinary.load_file(os.path.join(genie_dir, "data_CNA.txt"))
    .melt(id_vars="Hugo_Symbol", var_name="sample_id", value_name="value")
    .rename(columns={"Hugo_Symbol": "hugo_symbol"})
    .dropna(subset=["value"])
)
cna["alteration"] = cna["value"].map({-2: "deletion", 2: "amplification"})
cna = cna.dropna(subset=["alteration"])
print("done.", flush=True)

################################################################################
# Binary matrix with NAs for genes not tested by the panel of a sample
################################################################################

sample_panels = samples.rename(
    columns={"SAMPLE_ID": "sample_id", "SEQ_ASSAY_ID": "panel_id"}
)[["sample_id", "panel_id"]].copy()
# Samples profiled with panels missing from the release are not annotated
unknown = ~sample_panels.panel_id.isin(reference.panels.panel_ids())
sample_panels.loc[unknown, "panel_id"] = "no"

gene_binary = genebinary.create_gene_binary(
    samples=samples.SAMPLE_ID,
    mutation=mutations,
    fusion=fusions,
    cna=cna,
    specify_panel=sample_panels,
    reference=reference,
)
df = gene_binary.reset_index().merge(
    samples.rename(columns={"SAMPLE_ID": "sample_id"})[["sample_id", "CANCER_TYPE"]],
    on="sample_id",
)

################################################################################
# Frequently altered genes per cancer type
################################################################################

cancer_types = df.CANCER_TYPE.value_counts()
cancer_types = cancer_types[cancer_types >= 100].index
for cancer_type in tqdm(cancer_types, total=len(cancer_types)):
    top = genebinary.subset_by_frequency(
        df[df.CANCER_TYPE == cancer_type],
        threshold=threshold,
        other_vars="CANCER_TYPE",
    )
    freqs = genebinary.alteration_frequencies(
        top, other_vars="CANCER_TYPE", precision=1
    ).sort_values("AF_PERC_CI_LOWER", ascending=False)
    file_name = cancer_type.replace("/", "_").replace(" ", "_") + ".tsv"
    freqs.to_csv(os.path.join(out_dir, file_name), sep="\t")

# Frequencies for the same genes across all cancer types
top_any = genebinary.subset_by_frequency(df, threshold=threshold, by="CANCER_TYPE")
genebinary.alteration_frequencies(top_any, by="CANCER_TYPE").to_csv(
    os.path.join(out_dir, "all_cancer_types.tsv"), sep="\t"
)
